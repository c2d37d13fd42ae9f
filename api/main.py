"""FastAPI application for the blog RPC service."""

import logging
from contextlib import asynccontextmanager

import fastapi
from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.config import get_settings
from core.database import (
    create_engine,
    create_session_maker,
    dispose_engine,
    init_db,
)
from core.logger import configure_logging
from core.middleware import RequestContextMiddleware
from repositories.blog_repository import BlogDocumentStore
from routes import blog_router, health_router
from routes.blog_routes import STATUS_BY_CODE
from schemas import ErrorResponse
from services.blog_service import BlogService, BlogServiceError, ErrorCode

configure_logging()
logger = logging.getLogger(__name__)


def _error_response(status_code: int, code: ErrorCode, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(code=str(code), message=message).model_dump(),
    )


async def blog_service_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render typed service failures as {code, message} bodies."""
    if not isinstance(exc, BlogServiceError):
        return _error_response(500, ErrorCode.INTERNAL, "Unexpected error")

    status_code = STATUS_BY_CODE.get(exc.code, 500)
    log = logger.error if status_code >= 500 else logger.info
    log(
        "rpc.failed",
        extra={"code": str(exc.code), "path": request.url.path, "error": exc.message},
    )
    return _error_response(status_code, exc.code, exc.message)


async def validation_exception_handler(
    request: Request, exc: Exception
) -> JSONResponse:
    """Malformed request bodies are the caller's fault: INVALID_ARGUMENT."""
    if not isinstance(exc, RequestValidationError):
        return _error_response(500, ErrorCode.INTERNAL, "Unexpected error")

    errors = exc.errors()
    logger.warning(
        "request.validation_error",
        extra={
            "path": request.url.path,
            "method": request.method,
            "error_count": len(errors),
        },
    )
    fields = ", ".join(
        ".".join(str(part) for part in error.get("loc", ())) for error in errors
    )
    return _error_response(
        400, ErrorCode.INVALID_ARGUMENT, f"Invalid request fields: {fields}"
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler for unhandled exceptions."""
    logger.exception(
        "unhandled.exception",
        extra={
            "exc_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return _error_response(
        500, ErrorCode.INTERNAL, "An unexpected error occurred. Please try again."
    )


def build_blog_service(session_maker: async_sessionmaker[AsyncSession]) -> BlogService:
    """Wire the document store adapter into a BlogService."""
    return BlogService(BlogDocumentStore(session_maker))


@asynccontextmanager
async def lifespan(app: fastapi.FastAPI):
    """Open the store before serving, dispose it on shutdown."""
    settings = get_settings()
    app.state.engine = create_engine(settings)
    app.state.session_maker = create_session_maker(app.state.engine)

    app.state.init_done = False
    app.state.init_error = None

    try:
        await init_db(app.state.engine, settings.store_connect_timeout_seconds)
    except TimeoutError:
        logger.error(
            "init.timeout",
            extra={"hint": "Startup hung, check document store connectivity"},
        )
        await dispose_engine(app.state.engine)
        raise RuntimeError("Application startup timed out")
    except Exception as e:
        app.state.init_error = str(e)
        logger.error("init.failed", extra={"error": str(e)}, exc_info=True)
        await dispose_engine(app.state.engine)
        raise

    app.state.blog_service = build_blog_service(app.state.session_maker)
    app.state.init_done = True
    logger.info("init.complete")

    try:
        yield
    finally:
        await dispose_engine(app.state.engine)


_settings = get_settings()

app = fastapi.FastAPI(
    title="Blog Service",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs" if _settings.enable_docs or _settings.debug else None,
    redoc_url="/redoc" if _settings.enable_docs or _settings.debug else None,
    openapi_url=("/openapi.json" if _settings.enable_docs or _settings.debug else None),
)

app.add_exception_handler(BlogServiceError, blog_service_error_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

app.add_middleware(RequestContextMiddleware)

app.include_router(health_router)
app.include_router(blog_router)
