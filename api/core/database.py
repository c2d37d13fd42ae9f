"""Database engine, session, and pool management.

The blog collection lives in a single table. The engine (and its pool) is
created once by the application lifespan and handed to the document store;
nothing in here is a process-wide global.
"""

from __future__ import annotations

import asyncio
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from core.config import Settings, get_settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


def create_engine(settings: Settings | None = None) -> AsyncEngine:
    settings = settings or get_settings()

    engine_kwargs: dict = {"echo": settings.db_echo}

    if settings.is_sqlite:
        # One shared connection so an in-memory database survives across
        # sessions.
        engine_kwargs["poolclass"] = StaticPool
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_pool_max_overflow,
            pool_timeout=settings.db_pool_timeout,
            pool_recycle=settings.db_pool_recycle,
            pool_pre_ping=True,
        )

    return create_async_engine(settings.database_url, **engine_kwargs)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


async def create_collection(engine: AsyncEngine) -> None:
    """Create the blog table if it doesn't exist yet (idempotent)."""
    import models  # noqa: F401  registers BlogDocument with Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def init_db(engine: AsyncEngine, timeout: float | None = None) -> None:
    """Verify the store is reachable and its collection exists."""
    timeout = timeout or get_settings().store_connect_timeout_seconds
    logger.info("db.connectivity.verifying")

    async with asyncio.timeout(timeout):
        await check_db_connection(engine)
        await create_collection(engine)
    logger.info("db.connectivity.verified")


async def dispose_engine(engine: AsyncEngine) -> None:
    await engine.dispose()
    logger.info("db.engine.disposed")


async def check_db_connection(engine: AsyncEngine) -> None:
    """Run a trivial query; raises if the store can't be reached."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
        await conn.rollback()
