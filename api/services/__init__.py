"""Service layer for blog business logic."""

from services.blog_service import (
    BlogNotFoundError,
    BlogService,
    BlogServiceError,
    CancelledError,
    DeadlineExceededError,
    ErrorCode,
    InternalError,
    InvalidArgumentError,
)

__all__ = [
    "BlogNotFoundError",
    "BlogService",
    "BlogServiceError",
    "CancelledError",
    "DeadlineExceededError",
    "ErrorCode",
    "InternalError",
    "InvalidArgumentError",
]
