"""Tests for the filesystem blob store."""
from __future__ import annotations

import pytest

from book_library.errors import StorageError
from book_library.storage import BlobStore


@pytest.fixture
def blob_store(tmp_path):
    return BlobStore(tmp_path / "blobs")


def test_save_writes_blob_under_namespace(blob_store, tmp_path):
    key = blob_store.save("pdfs", b"%PDF-1.4 data", "pdf")

    assert key.startswith("pdfs/")
    assert key.endswith(".pdf")
    assert blob_store.exists(key)
    assert (tmp_path / "blobs" / key).read_bytes() == b"%PDF-1.4 data"


def test_save_generates_fresh_key_each_time(blob_store):
    first = blob_store.save("covers", b"same", "png")
    second = blob_store.save("covers", b"same", "png")

    assert first != second
    assert blob_store.exists(first) and blob_store.exists(second)


def test_save_normalises_extension(blob_store):
    key = blob_store.save("covers", b"x", ".JPG")
    assert key.endswith(".jpg")


def test_save_leaves_no_temp_files(blob_store, tmp_path):
    blob_store.save("pdfs", b"abc", "pdf")
    names = [p.name for p in (tmp_path / "blobs" / "pdfs").iterdir()]
    assert len(names) == 1
    assert not names[0].startswith(".upload-")


def test_save_rejects_unknown_namespace(blob_store):
    with pytest.raises(StorageError):
        blob_store.save("videos", b"x", "mp4")


def test_delete_is_idempotent(blob_store):
    key = blob_store.save("pdfs", b"abc", "pdf")

    assert blob_store.delete(key) is True
    assert not blob_store.exists(key)
    assert blob_store.delete(key) is False


def test_delete_ignores_empty_key(blob_store):
    assert blob_store.delete(None) is False
    assert blob_store.delete("") is False


def test_exists_is_false_for_missing_and_invalid_keys(blob_store):
    assert blob_store.exists("pdfs/missing.pdf") is False
    assert blob_store.exists(None) is False
    assert blob_store.exists("../outside.pdf") is False


@pytest.mark.parametrize("key", ["../etc/passwd", "/etc/passwd", "pdfs/../../x.pdf"])
def test_keys_outside_root_are_refused(blob_store, key):
    with pytest.raises(StorageError):
        blob_store.path_for(key)
    with pytest.raises(StorageError):
        blob_store.delete(key)


def test_path_for_points_at_stored_file(blob_store):
    key = blob_store.save("covers", b"img", "png")
    assert blob_store.path_for(key).read_bytes() == b"img"
