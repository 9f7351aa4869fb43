"""HTML routes for books: list, create, show, edit/update, delete, PDF viewer."""
import logging

from flask import (
    Blueprint, abort, current_app, flash, redirect, request, send_file,
    send_from_directory, url_for
)
from flask_login import current_user, login_required
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.datastructures import FileStorage

from . import books as manager
from .errors import BlobNotFoundError, NotFoundError, StorageError, ValidationError
from .forms import BookForm, ConfirmForm
from .models import Category
from .storage import NAMESPACES, get_blob_store
from .templates import (
    BOOK_DETAILS_TEMPLATE, BOOK_FORM_TEMPLATE, BOOKS_LIST_TEMPLATE,
    CONFIRM_DELETE_TEMPLATE, render_page
)

logger = logging.getLogger(__name__)

books_bp = Blueprint('books', __name__)

# (field, reason) -> message shown next to the form field
FIELD_MESSAGES = {
    ("title", "required"): "Title is required.",
    ("title", "max_length"): "Title must be at most 255 characters.",
    ("author", "required"): "Author is required.",
    ("author", "max_length"): "Author must be at most 255 characters.",
    ("description", "required"): "Description is required.",
    ("category_id", "required"): "Category is required.",
    ("category_id", "exists"): "Category not found.",
    ("quantity", "required"): "Quantity is required.",
    ("quantity", "integer"): "Quantity must be a whole number.",
    ("quantity", "min"): "Quantity cannot be negative.",
    ("file_path", "required"): "A PDF file is required.",
    ("file_path", "mimes"): "The book file must be a PDF.",
    ("file_path", "max_size"): "The PDF may be at most 10 MB.",
    ("cover_path", "required"): "A cover image is required.",
    ("cover_path", "image"): "The cover must be an image.",
    ("cover_path", "mimes"): "The cover must be a JPG, JPEG or PNG file.",
    ("cover_path", "max_size"): "The cover may be at most 2 MB.",
}


def field_message(error):
    return FIELD_MESSAGES.get((error.field, error.reason), f"{error.field} is invalid ({error.reason}).")


def apply_validation_errors(form, exc):
    for error in exc.errors:
        field = getattr(form, error.field, None)
        message = field_message(error)
        if field is None:
            flash(message, "error")
            continue
        field.errors = list(field.errors) + [message]


def upload_from(data):
    """Turn a submitted file field into a ``books.Upload``; None when no file was sent."""
    if not isinstance(data, FileStorage) or not data.filename:
        return None
    return manager.Upload(filename=data.filename, data=data.read(), content_type=data.mimetype)


def _get_or_404(book_id):
    try:
        return manager.get_book(book_id)
    except NotFoundError:
        abort(404)


# -----------------------
# Routes
# -----------------------
@books_bp.route('/')
def home():
    return redirect(url_for('books.books_list'))


@books_bp.route('/books')
@login_required
def books_list():
    listing = manager.list_books(current_user.id)
    return render_page(BOOKS_LIST_TEMPLATE, title="Books",
                       books=listing.books, user_books=listing.user_books)


@books_bp.route('/books/<int:book_id>')
@login_required
def book_detail(book_id):
    book = _get_or_404(book_id)
    return render_page(BOOK_DETAILS_TEMPLATE, title=book.title, book=book)


@books_bp.route('/books/create', methods=['GET', 'POST'])
@login_required
def book_create():
    form = BookForm()
    form.set_categories(Category.query.order_by(Category.name).all())
    if form.cancel.data:
        return redirect(url_for('books.books_list'))

    if form.validate_on_submit():
        try:
            manager.create_book(
                form.book_fields(),
                upload_from(form.file_path.data),
                upload_from(form.cover_path.data),
                principal_id=current_user.id,
                store=get_blob_store(),
            )
        except ValidationError as exc:
            apply_validation_errors(form, exc)
            flash("Please correct the errors and try again.", "error")
        except (SQLAlchemyError, StorageError):
            logger.error("could not create book", exc_info=True)
            flash("Could not save the book. Please try again.", "error")
        else:
            flash("Book added.", "success")
            return redirect(url_for('books.books_list'))
    elif request.method == 'POST':
        flash("The form has expired. Please try again.", "error")

    return render_page(BOOK_FORM_TEMPLATE, title="Add book", form=form, book=None,
                       heading="Add book", action=url_for('books.book_create'))


@books_bp.route('/books/<int:book_id>/edit', methods=['GET', 'POST'])
@login_required
def book_edit(book_id):
    try:
        book, categories = manager.edit_book(book_id)
    except NotFoundError:
        abort(404)
    # Prefill only on GET; a POST is validated on submitted values alone.
    form = BookForm() if request.method == 'POST' else BookForm(obj=book)
    form.set_categories(categories)
    if form.cancel.data:
        return redirect(url_for('books.books_list'))

    if form.validate_on_submit():
        try:
            manager.update_book(
                book_id,
                form.book_fields(),
                upload_from(form.file_path.data),
                upload_from(form.cover_path.data),
                store=get_blob_store(),
            )
        except NotFoundError:
            abort(404)
        except ValidationError as exc:
            apply_validation_errors(form, exc)
            flash("Please correct the errors and try again.", "error")
        except (SQLAlchemyError, StorageError):
            logger.error("could not update book id=%s", book_id, exc_info=True)
            flash("Could not update the book. Please try again.", "error")
        else:
            flash("Book updated.", "success")
            return redirect(url_for('books.books_list'))
    elif request.method == 'POST':
        flash("The form has expired. Please try again.", "error")

    return render_page(BOOK_FORM_TEMPLATE, title="Edit book", form=form, book=book,
                       heading=f"Edit {book.title}",
                       action=url_for('books.book_edit', book_id=book_id))


@books_bp.route('/books/<int:book_id>/delete', methods=['GET', 'POST'])
@login_required
def book_delete(book_id):
    book = _get_or_404(book_id)
    form = ConfirmForm()
    if request.method == 'POST':
        if request.form.get('confirm') != 'yes' or not form.validate_on_submit():
            flash("Delete cancelled.", "info")
            return redirect(url_for('books.books_list'))
        try:
            manager.delete_book(book_id, store=get_blob_store())
        except NotFoundError:
            abort(404)
        except (SQLAlchemyError, StorageError):
            logger.error("could not delete book id=%s", book_id, exc_info=True)
            flash("Could not delete the book. Please try again.", "error")
        else:
            flash("Book deleted.", "success")
        return redirect(url_for('books.books_list'))
    return render_page(CONFIRM_DELETE_TEMPLATE, title="Delete book", book=book, form=form)


@books_bp.route('/books/<int:book_id>/pdf')
@login_required
def book_pdf(book_id):
    try:
        path = manager.pdf_location(book_id, store=get_blob_store())
    except NotFoundError:
        abort(404)
    except BlobNotFoundError:
        flash("PDF file not found.", "error")
        return redirect(request.referrer or url_for('books.book_detail', book_id=book_id))
    return send_file(str(path), mimetype='application/pdf', as_attachment=False,
                     download_name=f"book-{book_id}.pdf", conditional=True)


@books_bp.route('/media/<path:key>')
@login_required
def media(key):
    namespace = key.split('/', 1)[0]
    if namespace not in NAMESPACES:
        abort(404)
    # send_from_directory refuses paths that escape the upload folder
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], key)
