"""Read-only JSON views of books."""
from flask import Blueprint, jsonify
from flask_login import current_user, login_required

from . import books as manager
from .errors import NotFoundError

api_bp = Blueprint('api', __name__, url_prefix='/api/v')


def api_error(message, status=400):
    return jsonify({"message": message}), status


@api_bp.route('/books')
@login_required
def api_books():
    listing = manager.list_books(current_user.id)
    return jsonify({
        "count": len(listing.books),
        "books": [b.to_dict() for b in listing.books],
        "my_books": [b.to_dict() for b in listing.user_books],
    })


@api_bp.route('/books/<int:book_id>')
@login_required
def api_book_item(book_id):
    try:
        book = manager.get_book(book_id)
    except NotFoundError:
        return api_error("Book not found", 404)
    return jsonify(book.to_dict())
