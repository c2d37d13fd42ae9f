"""HTTP client for the blog RPC surface.

Used by the CLI and by anything else that needs to call a running blog
service. Error bodies are turned back into the service's typed exceptions,
so callers handle the same taxonomy locally and remotely.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any

import httpx

from core.config import get_settings
from core.logger import get_logger
from schemas import (
    Blog,
    CreateBlogResponse,
    DeleteBlogResponse,
    ReadBlogResponse,
    UpdateBlogResponse,
)
from services.blog_service import (
    BlogNotFoundError,
    BlogServiceError,
    CancelledError,
    DeadlineExceededError,
    ErrorCode,
    InternalError,
    InvalidArgumentError,
)

logger = get_logger(__name__)

SERVICE_PATH = "/blog.BlogService"

_ERRORS_BY_CODE: dict[str, type[BlogServiceError]] = {
    ErrorCode.INVALID_ARGUMENT: InvalidArgumentError,
    ErrorCode.INTERNAL: InternalError,
    ErrorCode.DEADLINE_EXCEEDED: DeadlineExceededError,
    ErrorCode.CANCELLED: CancelledError,
}


def error_from_response(
    response: httpx.Response, blog_id: str = ""
) -> BlogServiceError:
    """Build the typed exception described by a failed RPC response."""
    try:
        body = response.json()
        code = str(body.get("code", ""))
        message = str(body.get("message", "")) or response.reason_phrase
    except (ValueError, AttributeError):
        code = ""
        message = f"HTTP {response.status_code}: {response.text[:200]}"

    if code == ErrorCode.NOT_FOUND:
        return BlogNotFoundError(blog_id, message=message)
    return _ERRORS_BY_CODE.get(code, InternalError)(message)


class BlogClient:
    """Async client for the four blog RPCs.

    Either owns an ``httpx.AsyncClient`` built from settings, or wraps one
    passed in (e.g. an ASGI transport in tests); only an owned client is
    closed by ``aclose()``.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        settings = get_settings()
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            base_url=base_url or settings.client_base_url,
            timeout=timeout or settings.http_timeout,
        )

    async def __aenter__(self) -> BlogClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()

    async def _call(
        self,
        method: str,
        payload: dict[str, Any],
        *,
        blog_id: str = "",
        deadline: float | None = None,
    ) -> dict[str, Any]:
        headers = {}
        if deadline is not None:
            headers["X-Request-Timeout"] = f"{deadline:g}"

        try:
            response = await self._client.post(
                f"{SERVICE_PATH}/{method}", json=payload, headers=headers
            )
        except httpx.TimeoutException as e:
            raise DeadlineExceededError(f"{method} timed out: {e}") from e
        except httpx.TransportError as e:
            raise InternalError(f"Cannot reach blog service: {e}") from e

        if response.is_success:
            return response.json()

        error = error_from_response(response, blog_id=blog_id)
        logger.debug("rpc.error", method=method, code=str(error.code))
        raise error

    async def create_blog(
        self,
        *,
        author_id: str,
        title: str,
        content: str,
        deadline: float | None = None,
    ) -> Blog:
        body = await self._call(
            "CreateBlog",
            {"blog": {"author_id": author_id, "title": title, "content": content}},
            deadline=deadline,
        )
        return CreateBlogResponse.model_validate(body).blog

    async def read_blog(self, blog_id: str, *, deadline: float | None = None) -> Blog:
        body = await self._call(
            "ReadBlog", {"blog_id": blog_id}, blog_id=blog_id, deadline=deadline
        )
        return ReadBlogResponse.model_validate(body).blog

    async def update_blog(self, blog: Blog, *, deadline: float | None = None) -> Blog:
        body = await self._call(
            "UpdateBlog",
            {"blog": blog.model_dump()},
            blog_id=blog.id,
            deadline=deadline,
        )
        return UpdateBlogResponse.model_validate(body).blog

    async def delete_blog(self, blog_id: str, *, deadline: float | None = None) -> str:
        body = await self._call(
            "DeleteBlog", {"blog_id": blog_id}, blog_id=blog_id, deadline=deadline
        )
        return DeleteBlogResponse.model_validate(body).blog_id
