"""Repository layer for document store access."""

from repositories.blog_repository import (
    BlogDocumentStore,
    BlogStore,
    StoreError,
    StoreInternalError,
    StoreUnavailableError,
)

__all__ = [
    "BlogDocumentStore",
    "BlogStore",
    "StoreError",
    "StoreInternalError",
    "StoreUnavailableError",
]
