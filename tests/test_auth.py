"""Tests for login/logout and the unauthorized handler."""
from __future__ import annotations


def test_login_page_renders(client):
    resp = client.get("/login")
    assert resp.status_code == 200
    assert "Log in" in resp.get_data(as_text=True)


def test_login_with_valid_credentials(client, user):
    resp = client.post("/login", data={"username": "alice", "password": "secret"})

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/books")
    assert client.get("/books").status_code == 200


def test_login_follows_local_next(client, user):
    resp = client.post("/login?next=/books/create", data={"username": "alice", "password": "secret"})

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/books/create")


def test_login_ignores_external_next(client, user):
    resp = client.post("/login?next=https://evil.example/", data={"username": "alice", "password": "secret"})

    assert resp.status_code == 302
    assert "evil.example" not in resp.headers["Location"]


def test_login_with_wrong_password(client, user):
    resp = client.post("/login", data={"username": "alice", "password": "nope"})

    assert resp.status_code == 200
    assert "Invalid username or password." in resp.get_data(as_text=True)


def test_login_requires_fields(client):
    resp = client.post("/login", data={"username": "", "password": ""})

    assert resp.status_code == 200
    assert "This field is required." in resp.get_data(as_text=True)


def test_logout(client, user):
    client.post("/login", data={"username": "alice", "password": "secret"})

    resp = client.post("/logout")

    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/login")
    assert client.get("/books").status_code == 302


def test_logout_requires_post(auth_client):
    assert auth_client.get("/logout").status_code == 405
