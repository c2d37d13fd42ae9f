"""Blog RPC endpoints.

Each operation is a POST to ``/blog.BlogService/<Method>``, mirroring gRPC
method paths. Failures are raised as BlogServiceError and rendered by the
handler registered in main.
"""

import asyncio
from collections.abc import Coroutine
from typing import Annotated, Any, TypeVar

from fastapi import APIRouter, Depends, Request
from starlette import status

from core.config import get_settings
from schemas import (
    CreateBlogRequest,
    CreateBlogResponse,
    DeleteBlogRequest,
    DeleteBlogResponse,
    ErrorResponse,
    ReadBlogRequest,
    ReadBlogResponse,
    UpdateBlogRequest,
    UpdateBlogResponse,
)
from services.blog_service import (
    BlogService,
    CancelledError,
    DeadlineExceededError,
    ErrorCode,
    InternalError,
    InvalidArgumentError,
)

router = APIRouter(prefix="/blog.BlogService", tags=["blog"])

DEADLINE_HEADER = "x-request-timeout"

STATUS_BY_CODE: dict[ErrorCode, int] = {
    ErrorCode.INVALID_ARGUMENT: status.HTTP_400_BAD_REQUEST,
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.DEADLINE_EXCEEDED: status.HTTP_504_GATEWAY_TIMEOUT,
    # Client Closed Request, as nginx logs it
    ErrorCode.CANCELLED: 499,
}


def _error_responses(*codes: ErrorCode) -> dict[int | str, dict]:
    return {STATUS_BY_CODE[code]: {"model": ErrorResponse} for code in codes}


def get_blog_service(request: Request) -> BlogService:
    service: BlogService | None = getattr(request.app.state, "blog_service", None)
    if service is None:
        raise InternalError("Blog service is not initialized")
    return service


def get_deadline(request: Request) -> float:
    """Seconds the caller is willing to wait for this call."""
    raw = request.headers.get(DEADLINE_HEADER)
    if raw is None:
        return get_settings().rpc_default_timeout_seconds
    try:
        timeout = float(raw)
    except ValueError as e:
        raise InvalidArgumentError(f"Invalid {DEADLINE_HEADER} header: {raw!r}") from e
    if timeout <= 0:
        raise InvalidArgumentError(f"{DEADLINE_HEADER} must be positive")
    return timeout


BlogServiceDep = Annotated[BlogService, Depends(get_blog_service)]
Deadline = Annotated[float, Depends(get_deadline)]


async def _wait_for_disconnect(request: Request) -> None:
    # The body has already been read, so the next message is the disconnect.
    while True:
        message = await request.receive()
        if message["type"] == "http.disconnect":
            return


T = TypeVar("T")


async def _run_rpc(
    request: Request, call: Coroutine[Any, Any, T], timeout: float
) -> T:
    """Await ``call`` until it finishes, the deadline passes, or the caller leaves.

    In the last two cases the call (and its store call) is cancelled.
    """
    rpc = asyncio.create_task(call)
    disconnect = asyncio.create_task(_wait_for_disconnect(request))
    try:
        async with asyncio.timeout(timeout):
            await asyncio.wait({rpc, disconnect}, return_when=asyncio.FIRST_COMPLETED)
    except TimeoutError as e:
        raise DeadlineExceededError(
            f"Deadline of {timeout:g}s exceeded before the store answered"
        ) from e
    finally:
        for task in (rpc, disconnect):
            task.cancel()
        await asyncio.gather(rpc, disconnect, return_exceptions=True)

    if rpc.cancelled():
        raise CancelledError("Caller cancelled the request")
    return rpc.result()


@router.post(
    "/CreateBlog",
    response_model=CreateBlogResponse,
    responses=_error_responses(ErrorCode.INTERNAL),
)
async def create_blog(
    request: Request,
    body: CreateBlogRequest,
    service: BlogServiceDep,
    deadline: Deadline,
) -> CreateBlogResponse:
    """Store a new blog; the store assigns its id."""
    blog = await _run_rpc(request, service.create_blog(body.blog), deadline)
    return CreateBlogResponse(blog=blog)


@router.post(
    "/ReadBlog",
    response_model=ReadBlogResponse,
    responses=_error_responses(ErrorCode.INVALID_ARGUMENT, ErrorCode.NOT_FOUND),
)
async def read_blog(
    request: Request,
    body: ReadBlogRequest,
    service: BlogServiceDep,
    deadline: Deadline,
) -> ReadBlogResponse:
    blog = await _run_rpc(request, service.read_blog(body.blog_id), deadline)
    return ReadBlogResponse(blog=blog)


@router.post(
    "/UpdateBlog",
    response_model=UpdateBlogResponse,
    responses=_error_responses(
        ErrorCode.INVALID_ARGUMENT, ErrorCode.NOT_FOUND, ErrorCode.INTERNAL
    ),
)
async def update_blog(
    request: Request,
    body: UpdateBlogRequest,
    service: BlogServiceDep,
    deadline: Deadline,
) -> UpdateBlogResponse:
    """Replace every field of an existing blog."""
    blog = await _run_rpc(request, service.update_blog(body.blog), deadline)
    return UpdateBlogResponse(blog=blog)


@router.post(
    "/DeleteBlog",
    response_model=DeleteBlogResponse,
    responses=_error_responses(ErrorCode.INTERNAL, ErrorCode.NOT_FOUND),
)
async def delete_blog(
    request: Request,
    body: DeleteBlogRequest,
    service: BlogServiceDep,
    deadline: Deadline,
) -> DeleteBlogResponse:
    blog_id = await _run_rpc(request, service.delete_blog(body.blog_id), deadline)
    return DeleteBlogResponse(blog_id=blog_id)
