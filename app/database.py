"""Async database access for logo metadata (SQLite or PostgreSQL).

The process-wide engine is built from ``DATABASE_URL`` at import time; tests
build their own with ``build_engine`` / ``build_session_factory``.
"""

import logging
import os
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

from app.config import get_settings

logger = logging.getLogger(__name__)

SQLITE_PREFIX = "sqlite+aiosqlite:///"


def get_database_url(url: str) -> str:
    """Rewrite a plain SQLite/PostgreSQL URL to its async driver."""
    if url.startswith("sqlite+aiosqlite://"):
        return url
    if url.startswith("sqlite://"):
        return url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+asyncpg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    return url


def _ensure_sqlite_dir(url: str) -> None:
    if not url.startswith(SQLITE_PREFIX):
        return
    path = url[len(SQLITE_PREFIX):]
    if path and path != ":memory:":
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)


def build_engine(url: str) -> AsyncEngine:
    """Async engine with pool settings for the URL's backend."""
    url = get_database_url(url)
    engine_kwargs = {"echo": False}

    if url.startswith("sqlite"):
        _ensure_sqlite_dir(url)
        # One shared connection; also keeps ":memory:" databases alive
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_pre_ping"] = True  # Verify connection before checkout
        engine_kwargs["pool_size"] = 5
        engine_kwargs["max_overflow"] = 10
        engine_kwargs["pool_recycle"] = 300
        engine_kwargs["pool_timeout"] = 30

    return create_async_engine(url, **engine_kwargs)


def build_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


async_engine = build_engine(get_settings().DATABASE_URL)
AsyncSessionLocal = build_session_factory(async_engine)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting async database sessions."""
    async with AsyncSessionLocal() as session:
        yield session


async def init_db() -> None:
    """Create tables for every model registered on ``SQLModel.metadata``."""
    logger.info("Initializing database tables...")
    await create_tables(async_engine)
    logger.info("Database tables ready.")


async def close_db() -> None:
    """Dispose the engine's connection pool."""
    logger.info("Closing database connections...")
    await async_engine.dispose()
