"""Pytest configuration and shared fixtures.

This module provides:
- An in-memory SQLite store (aiosqlite) for adapter and route tests
- A verified in-memory fake of BlogStore for service unit tests
- FastAPI test clients wired to either store

Architecture follows:
- https://pythonspeed.com/articles/verified-fakes/
"""

# Set environment variables BEFORE any imports that trigger Settings validation
import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from collections.abc import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from core.config import Settings, clear_settings_cache
from core.database import create_collection, create_engine, create_session_maker
from repositories.blog_repository import BlogDocumentStore
from services.blog_service import BlogService
from tests.fakes import InMemoryBlogStore

# =============================================================================
# Test Settings
# =============================================================================

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def test_settings() -> Settings:
    return Settings(database_url=TEST_DATABASE_URL)


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest_asyncio.fixture
async def test_engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine]:
    """Fresh in-memory database with the blog table for each test."""
    engine = create_engine(test_settings)
    await create_collection(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_maker(test_engine)


@pytest.fixture
def sql_store(session_maker: async_sessionmaker[AsyncSession]) -> BlogDocumentStore:
    return BlogDocumentStore(session_maker)


@pytest.fixture
def fake_store() -> InMemoryBlogStore:
    return InMemoryBlogStore()


@pytest.fixture
def blog_service(fake_store: InMemoryBlogStore) -> BlogService:
    return BlogService(fake_store)


# =============================================================================
# FastAPI Test Client Fixtures
# =============================================================================


@pytest.fixture
def app(
    test_engine: AsyncEngine, session_maker: async_sessionmaker[AsyncSession]
) -> Generator[FastAPI]:
    """The FastAPI app wired to the in-memory SQLite store.

    ASGITransport doesn't run the lifespan, so state is set up here the same
    way main.lifespan does it.
    """
    from main import app as fastapi_app
    from main import build_blog_service

    fastapi_app.state.engine = test_engine
    fastapi_app.state.session_maker = session_maker
    fastapi_app.state.blog_service = build_blog_service(session_maker)
    fastapi_app.state.init_done = True
    fastapi_app.state.init_error = None

    yield fastapi_app

    for name in ("engine", "session_maker", "blog_service"):
        if hasattr(fastapi_app.state, name):
            delattr(fastapi_app.state, name)
    fastapi_app.state.init_done = False


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for testing routes."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


# =============================================================================
# Utility Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None]:
    """Reset settings cache before each test."""
    clear_settings_cache()
    yield
    clear_settings_cache()
