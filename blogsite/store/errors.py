"""Errors raised by content store backends."""

from __future__ import annotations


class StoreError(Exception):
    """Base class for content store failures."""


class StoreUnavailable(StoreError):
    """The store could not be reached or failed server-side."""


class StoreRequestError(StoreError):
    """The store rejected the request."""


class DocumentNotFound(StoreRequestError):
    """No document exists with the given id."""

    def __init__(self, document_id: str) -> None:
        super().__init__(f"Document not found: {document_id}")
        self.document_id = document_id


class DuplicateDocument(StoreRequestError):
    """A document with the same unique key already exists."""


__all__ = [
    "DocumentNotFound",
    "DuplicateDocument",
    "StoreError",
    "StoreRequestError",
    "StoreUnavailable",
]
