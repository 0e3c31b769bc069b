"""
Async SQLAlchemy engine and session factory with an explicit lifecycle.

The ``Database`` is created once per application, connected in the
FastAPI lifespan before any request is served and disposed on shutdown.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from database.models import Base

logger = logging.getLogger(__name__)


class Database:
    """Owns the engine for one connection string."""

    def __init__(self, url: str, *, pool_size: int = 10, echo: bool = False) -> None:
        self.url = url
        self._pool_size = pool_size
        self._echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def connected(self) -> bool:
        return self._engine is not None

    def _engine_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {"echo": self._echo}
        # SQLite (used by the test suite) does not take server pool settings
        if not self.url.startswith("sqlite"):
            options.update(
                pool_size=self._pool_size,
                max_overflow=self._pool_size * 2,
                pool_recycle=3600,
                pool_pre_ping=True,
            )
        return options

    async def connect(self) -> None:
        """Create the engine and make sure the tables and indexes exist."""
        if self._engine is not None:
            return
        self._engine = create_async_engine(self.url, **self._engine_options())
        self._session_factory = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database connected (%s)", self._engine.url.render_as_string(hide_password=True))

    async def disconnect(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._session_factory = None
        logger.info("Database connection closed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a session that commits on success and rolls back on error."""
        if self._session_factory is None:
            raise RuntimeError("Database is not connected")
        async with self._session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
