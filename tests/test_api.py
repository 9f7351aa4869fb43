"""Tests for the read-only JSON endpoints."""
from __future__ import annotations


def test_api_requires_login(client):
    resp = client.get("/api/v/books")

    assert resp.status_code == 401
    assert resp.get_json() == {"message": "Authentication required"}


def test_api_lists_books_and_my_books(auth_client, make_book, other_user):
    mine = make_book(title="Mine")
    make_book(owner=other_user, title="Theirs")

    data = auth_client.get("/api/v/books").get_json()

    assert data["count"] == 2
    assert [b["title"] for b in data["books"]] == ["Mine", "Theirs"]
    assert [b["id"] for b in data["my_books"]] == [mine.id]


def test_api_book_item(auth_client, make_book, category):
    book = make_book(title="Walden", quantity="4")

    data = auth_client.get(f"/api/v/books/{book.id}").get_json()

    assert data["title"] == "Walden"
    assert data["quantity"] == 4
    assert data["category"] == {"id": category.id, "name": "Fiction"}
    assert data["file_path"] == book.file_path


def test_api_book_item_not_found(auth_client):
    resp = auth_client.get("/api/v/books/999")

    assert resp.status_code == 404
    assert resp.get_json() == {"message": "Book not found"}


def test_api_unknown_route_returns_json_404(auth_client):
    resp = auth_client.get("/api/v/nothing-here")

    assert resp.status_code == 404
    assert resp.get_json() == {"message": "Not found"}


def test_api_wrong_method_returns_json_405(auth_client):
    resp = auth_client.post("/api/v/books")

    assert resp.status_code == 405
    assert resp.get_json() == {"message": "Method not allowed"}
