"""Shared fixtures: app with in-memory SQLite, temp upload folder, users, uploads."""
from __future__ import annotations

import io
import struct
import zlib
from pathlib import Path

import pytest
from PIL import Image

from book_library import create_app
from book_library.books import Upload, create_book
from book_library.config import TestingConfig
from book_library.extensions import db
from book_library.models import Category, User
from book_library.storage import get_blob_store

PDF_BYTES = (
    b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog /Pages 2 0 R >>\nendobj\n"
    b"2 0 obj\n<< /Type /Pages /Kids [] /Count 0 >>\nendobj\n"
    b"trailer\n<< /Root 1 0 R >>\n%%EOF\n"
)


def image_bytes(fmt="PNG", size=(8, 8), color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format=fmt)
    return buf.getvalue()


def _png_chunk(kind, payload):
    return struct.pack(">I", len(payload)) + kind + payload + struct.pack(">I", zlib.crc32(kind + payload))


def png_header_bytes(width, height) -> bytes:
    """A PNG that declares ``width`` x ``height`` but carries no real pixel data."""
    ihdr = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return (b"\x89PNG\r\n\x1a\n" + _png_chunk(b"IHDR", ihdr)
            + _png_chunk(b"IDAT", zlib.compress(b"")) + _png_chunk(b"IEND", b""))


@pytest.fixture
def app(tmp_path):
    app = create_app(TestingConfig, UPLOAD_FOLDER=str(tmp_path / "uploads"))
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def upload_dir(app) -> Path:
    return Path(app.config["UPLOAD_FOLDER"])


@pytest.fixture
def store(app):
    return get_blob_store()


@pytest.fixture
def client(app):
    return app.test_client()


def _make_user(username: str) -> User:
    user = User(username=username)
    user.set_password("secret")
    db.session.add(user)
    db.session.commit()
    return user


@pytest.fixture
def user(app):
    return _make_user("alice")


@pytest.fixture
def other_user(app):
    return _make_user("bob")


@pytest.fixture
def category(app):
    cat = Category(name="Fiction")
    db.session.add(cat)
    db.session.commit()
    return cat


@pytest.fixture
def auth_client(client, user):
    with client.session_transaction() as sess:
        sess["_user_id"] = str(user.id)
        sess["_fresh"] = True
    return client


@pytest.fixture
def pdf_upload():
    def _make(data: bytes = PDF_BYTES, filename: str = "book.pdf") -> Upload:
        return Upload(filename=filename, data=data, content_type="application/pdf")
    return _make


@pytest.fixture
def cover_upload():
    def _make(data: bytes | None = None, filename: str = "cover.png") -> Upload:
        return Upload(filename=filename, data=image_bytes() if data is None else data, content_type="image/png")
    return _make


@pytest.fixture
def book_fields(category):
    def _make(**overrides) -> dict:
        fields = {
            "title": "T",
            "author": "A",
            "description": "D",
            "category_id": str(category.id),
            "quantity": "3",
        }
        fields.update(overrides)
        return fields
    return _make


@pytest.fixture
def make_book(store, user, book_fields, pdf_upload, cover_upload):
    def _make(owner=None, **overrides):
        owner = owner or user
        return create_book(book_fields(**overrides), pdf_upload(), cover_upload(),
                           principal_id=owner.id, store=store)
    return _make


@pytest.fixture
def form_data(category):
    """Multipart form payload for the create/edit pages; files are fresh streams per call."""
    def _make(with_files: bool = True, **overrides) -> dict:
        data = {
            "title": "The Hobbit",
            "author": "J. R. R. Tolkien",
            "description": "There and back again.",
            "category_id": str(category.id),
            "quantity": "2",
        }
        if with_files:
            data["file_path"] = (io.BytesIO(PDF_BYTES), "hobbit.pdf")
            data["cover_path"] = (io.BytesIO(image_bytes()), "hobbit.png")
        data.update(overrides)
        return data
    return _make


def stored_files(upload_dir: Path) -> list:
    if not upload_dir.exists():
        return []
    return sorted(p.relative_to(upload_dir).as_posix() for p in upload_dir.rglob("*") if p.is_file())


@pytest.fixture
def list_blobs(upload_dir):
    return lambda: stored_files(upload_dir)
