"""Error types raised by the book manager and the blob store."""
from typing import List, NamedTuple


class BookLibraryError(Exception):
    """Base class for application errors."""


class FieldError(NamedTuple):
    field: str
    reason: str


class ValidationError(BookLibraryError):
    """One or more input fields failed validation; nothing was written.

    ``errors`` holds ``FieldError(field, reason)`` pairs. Turning reasons into
    user-facing text is left to the caller.
    """

    def __init__(self, errors: List[FieldError]):
        self.errors = list(errors)
        super().__init__(", ".join(f"{e.field}: {e.reason}" for e in self.errors))

    def fields(self):
        return {e.field for e in self.errors}

    def reasons_for(self, field):
        return [e.reason for e in self.errors if e.field == field]


class NotFoundError(BookLibraryError):
    """The requested record does not exist."""


class BlobNotFoundError(BookLibraryError):
    """A record references a blob that is absent from the store."""


class StorageError(BookLibraryError):
    """Writing or deleting a blob failed."""
