"""Blog service: the four caller-facing blog operations.

Translates between the wire-level ``Blog`` schema and stored documents,
owns the string <-> native identifier conversion, and folds every store
failure into a small typed error taxonomy.
"""

import uuid
from enum import StrEnum

from core.logger import get_logger
from models import BlogDocument
from repositories.blog_repository import BlogStore, StoreError
from schemas import Blog

logger = get_logger(__name__)


class ErrorCode(StrEnum):
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL = "INTERNAL"
    DEADLINE_EXCEEDED = "DEADLINE_EXCEEDED"
    CANCELLED = "CANCELLED"


class BlogServiceError(Exception):
    """Base class for caller-visible failures."""

    code: ErrorCode = ErrorCode.INTERNAL

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidArgumentError(BlogServiceError):
    """Raised when a caller-supplied blog id is not well-formed."""

    code = ErrorCode.INVALID_ARGUMENT


class BlogNotFoundError(BlogServiceError):
    """Raised when the targeted blog doesn't exist."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, blog_id: str, message: str | None = None):
        self.blog_id = blog_id
        super().__init__(message or f"Cannot find blog with id {blog_id}")


class InternalError(BlogServiceError):
    """Raised when the store fails or returns something unusable."""

    code = ErrorCode.INTERNAL


class DeadlineExceededError(BlogServiceError):
    """Raised by the transport when a call outlives the caller's deadline."""

    code = ErrorCode.DEADLINE_EXCEEDED


class CancelledError(BlogServiceError):
    """Raised by the transport when the caller goes away mid-call."""

    code = ErrorCode.CANCELLED


def parse_blog_id(blog_id: str) -> uuid.UUID:
    """Parse the wire form of a blog id.

    Raises:
        ValueError: If ``blog_id`` is not a UUID.
    """
    if not isinstance(blog_id, str) or not blog_id:
        raise ValueError("blog id must be a non-empty string")
    return uuid.UUID(blog_id)


def render_blog_id(blog_id: uuid.UUID) -> str:
    return str(blog_id)


def _to_blog(document: BlogDocument) -> Blog:
    return Blog(
        id=render_blog_id(document.id),
        author_id=document.author_id,
        title=document.title,
        content=document.content,
    )


class BlogService:
    """Create, read, update and delete blog records.

    The store is injected; whoever builds the service owns its lifecycle.
    Calls are stateless and never retried here.
    """

    def __init__(self, store: BlogStore):
        self.store = store

    async def create_blog(self, blog: Blog) -> Blog:
        """Insert a new record. Any id on ``blog`` is ignored."""
        try:
            blog_id = await self.store.insert(
                author_id=blog.author_id, title=blog.title, content=blog.content
            )
        except StoreError as e:
            logger.error("blog.create.failed", error=str(e))
            raise InternalError(
                f"Internal error while inserting document: {e}"
            ) from e

        if not isinstance(blog_id, uuid.UUID):
            raise InternalError("Store did not return a usable object id")

        created = blog.model_copy(update={"id": render_blog_id(blog_id)})
        logger.info("blog.created", blog_id=created.id)
        return created

    async def read_blog(self, blog_id: str) -> Blog:
        try:
            oid = parse_blog_id(blog_id)
        except ValueError as e:
            raise InvalidArgumentError(f"Cannot parse blog id {blog_id!r}") from e

        document = await self._find(oid)
        if document is None:
            raise BlogNotFoundError(render_blog_id(oid))
        return _to_blog(document)

    async def update_blog(self, blog: Blog) -> Blog:
        """Replace every field of an existing record.

        The existence check and the replace are two separate store calls. A
        concurrent delete in between makes the replace miss, which surfaces
        as a late BlogNotFoundError; a concurrent update is overwritten.
        """
        try:
            oid = parse_blog_id(blog.id)
        except ValueError as e:
            raise InvalidArgumentError(f"Cannot parse blog id {blog.id!r}") from e

        rendered = render_blog_id(oid)
        if await self._find(oid) is None:
            raise BlogNotFoundError(rendered)

        try:
            replaced = await self.store.replace_by_id(
                oid, author_id=blog.author_id, title=blog.title, content=blog.content
            )
        except StoreError as e:
            logger.error("blog.update.failed", blog_id=rendered, error=str(e))
            raise InternalError(f"Error occurred while updating the blog: {e}") from e

        if not replaced:
            logger.info("blog.update.raced_delete", blog_id=rendered)
            raise BlogNotFoundError(rendered)

        logger.info("blog.updated", blog_id=rendered)
        return blog.model_copy(update={"id": rendered})

    async def delete_blog(self, blog_id: str) -> str:
        """Delete a record and return its id.

        A malformed id is reported as INTERNAL here (not INVALID_ARGUMENT as
        in read/update) to stay compatible with existing callers.
        """
        try:
            oid = parse_blog_id(blog_id)
        except ValueError as e:
            raise InternalError(f"Cannot parse blog id {blog_id!r}: {e}") from e

        rendered = render_blog_id(oid)
        try:
            deleted = await self.store.delete_by_id(oid)
        except StoreError as e:
            logger.error("blog.delete.failed", blog_id=rendered, error=str(e))
            raise InternalError(f"Something went wrong: {e}") from e

        if deleted == 0:
            raise BlogNotFoundError(rendered)

        logger.info("blog.deleted", blog_id=rendered)
        return rendered

    async def _find(self, oid: uuid.UUID) -> BlogDocument | None:
        try:
            return await self.store.find_by_id(oid)
        except StoreError as e:
            logger.error("blog.find.failed", blog_id=render_blog_id(oid), error=str(e))
            raise InternalError(f"Error occurred while reading the blog: {e}") from e
