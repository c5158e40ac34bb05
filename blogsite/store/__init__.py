"""Content store backends."""

from .base import ContentStore
from .errors import (
    DocumentNotFound,
    DuplicateDocument,
    StoreError,
    StoreRequestError,
    StoreUnavailable,
)
from .sanity import SanityContentStore
from .sanity_client import SanityClient
from .sql import SqlContentStore

__all__ = [
    "ContentStore",
    "DocumentNotFound",
    "DuplicateDocument",
    "SanityClient",
    "SanityContentStore",
    "SqlContentStore",
    "StoreError",
    "StoreRequestError",
    "StoreUnavailable",
]
