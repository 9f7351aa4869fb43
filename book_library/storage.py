"""Filesystem blob store for uploaded PDFs and cover images.

Blobs live under ``<root>/<namespace>/<hex>.<ext>`` and are addressed by the
relative key ``"<namespace>/<hex>.<ext>"``, which is what the ``books`` table
stores. Every save generates a fresh key, so two records never share a blob.
"""
import logging
import os
import tempfile
import uuid
from pathlib import Path

from flask import current_app

from .errors import StorageError

logger = logging.getLogger(__name__)

NAMESPACES = ("pdfs", "covers")


class BlobStore:

    def __init__(self, root):
        self.root = Path(root)

    def _resolve(self, key):
        """Map a key to an absolute path, refusing keys outside the root."""
        if not key or key.startswith(("/", "\\")):
            raise StorageError(f"invalid blob key: {key!r}")
        root = self.root.resolve()
        target = (root / key).resolve()
        if root not in target.parents:
            raise StorageError(f"invalid blob key: {key!r}")
        return target

    def save(self, namespace, data, extension):
        """Write ``data`` under a new key in ``namespace`` and return the key."""
        if namespace not in NAMESPACES:
            raise StorageError(f"unknown namespace: {namespace!r}")
        key = f"{namespace}/{uuid.uuid4().hex}.{extension.lower().lstrip('.')}"
        target = self._resolve(key)
        tmp_path = None
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp_fd, tmp_path = tempfile.mkstemp(dir=str(target.parent), prefix=".upload-", suffix=".tmp")
            with os.fdopen(tmp_fd, "wb") as fh:
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, target)
        except OSError as exc:
            if tmp_path and os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise StorageError(f"could not store blob {key}: {exc}") from exc
        logger.debug("stored blob key=%s bytes=%d", key, len(data))
        return key

    def delete(self, key):
        """Remove a blob. Missing blobs are ignored; returns True if one was removed."""
        if not key:
            return False
        target = self._resolve(key)
        try:
            target.unlink()
        except FileNotFoundError:
            logger.warning("blob already missing key=%s", key)
            return False
        except OSError as exc:
            raise StorageError(f"could not delete blob {key}: {exc}") from exc
        logger.debug("deleted blob key=%s", key)
        return True

    def exists(self, key):
        if not key:
            return False
        try:
            return self._resolve(key).is_file()
        except StorageError:
            return False

    def path_for(self, key):
        return self._resolve(key)


def get_blob_store():
    """Blob store bound to the current application."""
    return current_app.extensions["blob_store"]
