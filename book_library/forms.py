"""Forms for the book, login and confirmation pages."""
from flask_wtf import FlaskForm
from flask_wtf.file import FileField
from wtforms import PasswordField, SelectField, StringField, SubmitField, TextAreaField
from wtforms.validators import DataRequired, Length


class BookForm(FlaskForm):
    # Field rules live in book_library.books; the form only carries and renders
    # the values (and the CSRF token).
    title = StringField("Title")
    author = StringField("Author")
    description = TextAreaField("Description")
    category_id = SelectField("Category", validate_choice=False)
    quantity = StringField("Quantity", render_kw={"type": "number", "min": 0})
    file_path = FileField("PDF file")
    cover_path = FileField("Cover image")
    submit = SubmitField("Save")
    cancel = SubmitField("Cancel")

    def set_categories(self, categories):
        self.category_id.choices = [("", "-- choose a category --")] + \
            [(str(c.id), c.name) for c in categories]

    def book_fields(self):
        return {
            "title": self.title.data,
            "author": self.author.data,
            "description": self.description.data,
            "category_id": self.category_id.data,
            "quantity": self.quantity.data,
        }


class LoginForm(FlaskForm):
    username = StringField("Username", validators=[DataRequired(), Length(max=80)])
    password = PasswordField("Password", validators=[DataRequired()])
    submit = SubmitField("Log in")


class ConfirmForm(FlaskForm):
    """Empty form used for the CSRF token on delete/logout buttons."""
