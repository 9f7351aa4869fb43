"""Flask CLI commands: ``flask --app book_library <command>``."""
import click
from sqlalchemy.exc import IntegrityError

from .extensions import db
from .models import Category, User

DEFAULT_CATEGORIES = ["Fiction", "Non-fiction", "Science", "History"]


def register_cli(app):

    @app.cli.command("init-db")
    @click.option("--seed/--no-seed", default=False, help="Add the default categories.")
    def init_db(seed):
        """Create the database tables."""
        db.create_all()
        if seed and not Category.query.first():
            db.session.add_all([Category(name=name) for name in DEFAULT_CATEGORIES])
            db.session.commit()
            click.echo(f"Added {len(DEFAULT_CATEGORIES)} categories.")
        click.echo("Database initialized.")

    @app.cli.command("create-user")
    @click.argument("username")
    @click.password_option()
    def create_user(username, password):
        """Create a user who can log in."""
        user = User(username=username.strip())
        user.set_password(password)
        db.session.add(user)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise click.ClickException(f"User {username!r} already exists.")
        click.echo(f"Created user {user.username} (id={user.id}).")

    @app.cli.command("add-category")
    @click.argument("name")
    def add_category(name):
        """Add a book category."""
        category = Category(name=name.strip())
        db.session.add(category)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            raise click.ClickException(f"Category {name!r} already exists.")
        click.echo(f"Added category {category.name} (id={category.id}).")
