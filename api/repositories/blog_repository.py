"""Document store adapter for blog records.

Four single-document primitives against the ``blog`` collection. Each call
runs in its own session and transaction, so every operation is atomic per
document and a failed call leaves nothing behind on the pooled connection.
"""

import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Protocol

from sqlalchemy import delete, update
from sqlalchemy.exc import (
    DisconnectionError,
    InterfaceError,
    OperationalError,
    SQLAlchemyError,
)
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from models import BlogDocument
from repositories.utils import log_slow_query

_UNAVAILABLE_ERRORS = (
    OperationalError,
    InterfaceError,
    DisconnectionError,
    PoolTimeoutError,
    OSError,
)


class StoreError(Exception):
    """Base class for document store failures."""


class StoreUnavailableError(StoreError):
    """The store could not be reached (connection refused, pool exhausted)."""


class StoreInternalError(StoreError):
    """The store was reached but the operation failed."""


class BlogStore(Protocol):
    """Capability surface the blog service depends on."""

    async def insert(self, *, author_id: str, title: str, content: str) -> uuid.UUID:
        ...

    async def find_by_id(self, blog_id: uuid.UUID) -> BlogDocument | None:
        ...

    async def replace_by_id(
        self, blog_id: uuid.UUID, *, author_id: str, title: str, content: str
    ) -> bool:
        ...

    async def delete_by_id(self, blog_id: uuid.UUID) -> int:
        ...


class BlogDocumentStore:
    """SQLAlchemy-backed implementation of BlogStore."""

    def __init__(self, session_maker: async_sessionmaker[AsyncSession]):
        self.session_maker = session_maker

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        """Yield a session inside a transaction, translating driver errors."""
        try:
            async with self.session_maker() as session, session.begin():
                yield session
        except _UNAVAILABLE_ERRORS as e:
            raise StoreUnavailableError(str(e)) from e
        except SQLAlchemyError as e:
            raise StoreInternalError(str(e)) from e

    @log_slow_query("blog.insert")
    async def insert(self, *, author_id: str, title: str, content: str) -> uuid.UUID:
        """Store a new document and return the identifier it was given."""
        async with self._transaction() as session:
            document = BlogDocument(author_id=author_id, title=title, content=content)
            session.add(document)
            await session.flush()
            blog_id = document.id

        if not isinstance(blog_id, uuid.UUID):
            raise StoreInternalError(f"Store assigned an unusable id: {blog_id!r}")
        return blog_id

    @log_slow_query("blog.find_by_id")
    async def find_by_id(self, blog_id: uuid.UUID) -> BlogDocument | None:
        async with self._transaction() as session:
            return await session.get(BlogDocument, blog_id)

    @log_slow_query("blog.replace_by_id")
    async def replace_by_id(
        self, blog_id: uuid.UUID, *, author_id: str, title: str, content: str
    ) -> bool:
        """Overwrite every field of the document.

        Returns False when no document has this id (e.g. deleted after the
        caller last saw it).
        """
        async with self._transaction() as session:
            result = await session.execute(
                update(BlogDocument)
                .where(BlogDocument.id == blog_id)
                .values(author_id=author_id, title=title, content=content)
            )
            return result.rowcount > 0

    @log_slow_query("blog.delete_by_id")
    async def delete_by_id(self, blog_id: uuid.UUID) -> int:
        async with self._transaction() as session:
            result = await session.execute(
                delete(BlogDocument).where(BlogDocument.id == blog_id)
            )
            return result.rowcount
