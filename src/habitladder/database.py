"""Async SQLAlchemy engine and session management.

The application owns exactly one :class:`Database` handle. It is created by
the app factory, stored on ``app.state`` and connected during the lifespan
hook or lazily on first use by the session dependency.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator, AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import structlog
from fastapi import Request
from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from habitladder.config import Settings
from habitladder.db.base import Base
from habitladder.errors import StorageError

logger = structlog.get_logger()


def _engine_options(url: str, settings: Settings) -> dict[str, Any]:
    """Build driver-specific engine options with explicit timeouts."""
    backend = make_url(url).get_backend_name()
    if backend == "sqlite":
        return {
            "echo": False,
            "connect_args": {"timeout": settings.db_connect_timeout_seconds},
        }
    return {
        "echo": False,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
        "pool_timeout": settings.db_pool_timeout_seconds,
        "pool_pre_ping": True,
        "connect_args": {
            "timeout": settings.db_connect_timeout_seconds,
            "command_timeout": settings.db_command_timeout_seconds,
            "statement_cache_size": 0,
        },
    }


class Database:
    """Process-wide database handle with single-flight initialization.

    Concurrent callers of :meth:`connect` await the same in-flight task, so
    only one engine is ever created per handle.
    """

    def __init__(self, url: str, settings: Settings) -> None:
        self.url = url
        self._settings = settings
        self._engine: AsyncEngine | None = None
        self._session_factory: async_sessionmaker[AsyncSession] | None = None
        self._connecting: asyncio.Task[async_sessionmaker[AsyncSession]] | None = None

    @property
    def is_connected(self) -> bool:
        return self._session_factory is not None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            msg = "Database not connected. Call connect() first."
            raise RuntimeError(msg)
        return self._engine

    async def connect(self) -> async_sessionmaker[AsyncSession]:
        """Open the engine once and return the session factory."""
        if self._session_factory is not None:
            return self._session_factory
        if self._connecting is None:
            self._connecting = asyncio.ensure_future(self._open())
        task = self._connecting
        try:
            return await asyncio.shield(task)
        except Exception:
            # a failed attempt is not cached; the next caller starts a fresh one
            if self._connecting is task and task.done():
                self._connecting = None
            raise

    async def _open(self) -> async_sessionmaker[AsyncSession]:
        engine = create_async_engine(self.url, **_engine_options(self.url, self._settings))
        try:
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        except (SQLAlchemyError, OSError) as e:
            await engine.dispose()
            logger.error("database_connect_failed", backend=make_url(self.url).get_backend_name(), error=str(e))
            raise StorageError("connect", str(e)) from e

        self._engine = engine
        self._session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        logger.info("database_connected", backend=make_url(self.url).get_backend_name())
        return self._session_factory

    async def create_all(self) -> None:
        """Create every table known to the ORM metadata (tests and dev setups)."""
        await self.connect()
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        await self.connect()
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def close(self) -> None:
        """Dispose of the engine. Safe to call when never connected."""
        if self._connecting is not None and not self._connecting.done():
            self._connecting.cancel()
        if self._engine is not None:
            await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        self._connecting = None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        factory = await self.connect()
        async with factory() as session:
            yield session


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an async database session (FastAPI dependency)."""
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
