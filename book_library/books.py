"""
Book manager: the operations behind the book pages.

Each operation receives the acting principal id and the blob store
explicitly and raises the errors in ``book_library.errors``:

- ValidationError before any write when input is rejected
- NotFoundError when the book id does not resolve
- BlobNotFoundError when a referenced file is gone
- StorageError when the blob store fails

Blob handling follows the record lifecycle. Create stores both files and
then the row. Update stores new files, commits the row, and only then deletes
the files it replaced. Delete removes both files, then the row.
"""
import io
import logging
import os
from dataclasses import dataclass
from typing import List, Optional

import bleach
from flask import current_app
from PIL import Image, UnidentifiedImageError

from .errors import (
    BlobNotFoundError, FieldError, NotFoundError, StorageError, ValidationError
)
from .extensions import db
from .models import Book, Category

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("title", "author", "description")
TEXT_MAX_LENGTH = {"title": 255, "author": 255}
ALLOWED_TAGS = ['b', 'i', 'u', 'em', 'strong', 'p', 'br', 'ul', 'ol', 'li']

PDF_MAX_BYTES = 10 * 1024 * 1024
COVER_MAX_BYTES = 2 * 1024 * 1024
PDF_EXTENSIONS = {"pdf"}
COVER_EXTENSIONS = {"jpeg", "jpg", "png"}
# Pillow format name -> stored file extension
COVER_FORMATS = {"JPEG": "jpg", "PNG": "png"}


@dataclass
class Upload:
    """An uploaded file, already read into memory."""
    filename: str
    data: bytes
    content_type: Optional[str] = None

    @property
    def extension(self):
        return os.path.splitext(self.filename or "")[1].lower().lstrip(".")


@dataclass
class BookListing:
    books: List[Book]
    user_books: List[Book]


# -----------------------
# Validation
# -----------------------
def _limit(name, default):
    return current_app.config.get(name, default)


def _validate_fields(fields):
    """Check the text/category/quantity inputs.

    Returns ``(values, errors)``; ``values`` holds the cleaned column values
    for every field that passed.
    """
    values = {}
    errors = []

    for name in TEXT_FIELDS:
        raw = fields.get(name)
        value = raw.strip() if isinstance(raw, str) else ""
        if name == "description":
            value = bleach.clean(value, tags=ALLOWED_TAGS, strip=True).strip()
        if not value:
            errors.append(FieldError(name, "required"))
        elif name in TEXT_MAX_LENGTH and len(value) > TEXT_MAX_LENGTH[name]:
            errors.append(FieldError(name, "max_length"))
        else:
            values[name] = value

    raw = fields.get("category_id")
    if raw is None or str(raw).strip() == "":
        errors.append(FieldError("category_id", "required"))
    else:
        try:
            category_id = int(str(raw).strip())
        except ValueError:
            errors.append(FieldError("category_id", "exists"))
        else:
            if category_exists(category_id):
                values["category_id"] = category_id
            else:
                errors.append(FieldError("category_id", "exists"))

    raw = fields.get("quantity")
    if raw is None or str(raw).strip() == "":
        errors.append(FieldError("quantity", "required"))
    else:
        try:
            quantity = int(str(raw).strip())
        except ValueError:
            errors.append(FieldError("quantity", "integer"))
        else:
            if quantity < 0:
                errors.append(FieldError("quantity", "min"))
            else:
                values["quantity"] = quantity

    return values, errors


def _check_pdf(upload, required):
    if upload is None:
        return [FieldError("file_path", "required")] if required else []
    if upload.extension not in PDF_EXTENSIONS or not upload.data.startswith(b"%PDF-"):
        return [FieldError("file_path", "mimes")]
    if len(upload.data) > _limit("PDF_MAX_BYTES", PDF_MAX_BYTES):
        return [FieldError("file_path", "max_size")]
    return []


def _check_cover(upload, required):
    """Returns ``(errors, extension)`` where extension is what the blob is stored as."""
    if upload is None:
        return ([FieldError("cover_path", "required")] if required else []), None
    if len(upload.data) > _limit("COVER_MAX_BYTES", COVER_MAX_BYTES):
        return [FieldError("cover_path", "max_size")], None
    try:
        with Image.open(io.BytesIO(upload.data)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError):
        return [FieldError("cover_path", "image")], None
    if image_format not in COVER_FORMATS or upload.extension not in COVER_EXTENSIONS:
        return [FieldError("cover_path", "mimes")], None
    return [], COVER_FORMATS[image_format]


def category_exists(category_id):
    return db.session.get(Category, category_id) is not None


def _discard(store, keys):
    """Best-effort removal of blobs that are no longer referenced."""
    for key in keys:
        if not key:
            continue
        try:
            store.delete(key)
        except StorageError:
            logger.warning("could not remove unreferenced blob key=%s", key, exc_info=True)


# -----------------------
# Operations
# -----------------------
def list_books(principal_id):
    """All books, plus the ones owned by ``principal_id``."""
    books = Book.query.order_by(Book.id).all()
    if principal_id is None:
        user_books = []
    else:
        user_books = Book.query.filter_by(owner_id=principal_id).order_by(Book.id).all()
    return BookListing(books=books, user_books=user_books)


def get_book(book_id):
    book = db.session.get(Book, book_id)
    if book is None:
        raise NotFoundError(f"book {book_id} not found")
    return book


def edit_book(book_id):
    """The book to edit and every category it may be moved to."""
    book = get_book(book_id)
    categories = Category.query.order_by(Category.name).all()
    return book, categories


def create_book(fields, pdf, cover, principal_id, store):
    values, errors = _validate_fields(fields)
    errors += _check_pdf(pdf, required=True)
    cover_errors, cover_ext = _check_cover(cover, required=True)
    errors += cover_errors
    if errors:
        raise ValidationError(errors)

    stored = []
    try:
        file_path = store.save("pdfs", pdf.data, "pdf")
        stored.append(file_path)
        cover_path = store.save("covers", cover.data, cover_ext)
        stored.append(cover_path)

        book = Book(
            title=values["title"],
            author=values["author"],
            description=values["description"],
            category_id=values["category_id"],
            quantity=values["quantity"],
            file_path=file_path,
            cover_path=cover_path,
            owner_id=principal_id,
        )
        db.session.add(book)
        db.session.commit()
    except Exception:
        db.session.rollback()
        _discard(store, stored)
        raise

    logger.info("created book id=%s owner=%s pdf=%s cover=%s",
                book.id, principal_id, file_path, cover_path)
    return book


def update_book(book_id, fields, pdf, cover, store):
    """Overwrite a book's fields; files are replaced only when supplied.

    The owner is never changed.
    """
    book = get_book(book_id)

    values, errors = _validate_fields(fields)
    errors += _check_pdf(pdf, required=False)
    cover_errors, cover_ext = _check_cover(cover, required=False)
    errors += cover_errors
    if errors:
        raise ValidationError(errors)

    stored = []
    replaced = []
    try:
        if pdf is not None:
            new_key = store.save("pdfs", pdf.data, "pdf")
            stored.append(new_key)
            replaced.append(book.file_path)
            book.file_path = new_key
        if cover is not None:
            new_key = store.save("covers", cover.data, cover_ext)
            stored.append(new_key)
            replaced.append(book.cover_path)
            book.cover_path = new_key

        for name, value in values.items():
            setattr(book, name, value)
        db.session.commit()
    except Exception:
        db.session.rollback()
        _discard(store, stored)
        raise

    # Old blobs go only once the record points at the new ones
    _discard(store, replaced)
    logger.info("updated book id=%s replaced=%s", book.id, [k for k in replaced if k])
    return book


def delete_book(book_id, store):
    book = get_book(book_id)

    for key in (book.file_path, book.cover_path):
        if key:
            store.delete(key)

    db.session.delete(book)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
    logger.info("deleted book id=%s", book_id)


def pdf_location(book_id, store):
    """Filesystem path of a book's PDF, for streaming."""
    book = get_book(book_id)
    if not book.file_path or not store.exists(book.file_path):
        raise BlobNotFoundError(f"PDF for book {book_id} not found")
    return store.path_for(book.file_path)
