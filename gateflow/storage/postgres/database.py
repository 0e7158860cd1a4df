"""
PostgreSQL engine and session lifecycle for the workflow store.

A Database is opened once per process (``async with Database(settings)``)
and hands out one committed-or-rolled-back session per store operation.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from gateflow.config import get_settings
from gateflow.config.settings import PostgresSettings
from gateflow.storage.postgres.models import Base

logger = logging.getLogger(__name__)


class Database:
    """Pooled async engine plus the session factory bound to it."""

    def __init__(self, settings: Optional[PostgresSettings] = None):
        self.settings = settings or get_settings().postgres
        self._engine: Optional[AsyncEngine] = None
        self._sessions: Optional[async_sessionmaker[AsyncSession]] = None

    async def __aenter__(self) -> "Database":
        await self.open()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    async def open(self) -> None:
        """Create the engine and session factory. Opening twice is a no-op."""
        if self._engine is not None:
            return

        self._engine = create_async_engine(
            self.settings.url,
            pool_size=self.settings.pool_size,
            max_overflow=self.settings.max_overflow,
            pool_timeout=self.settings.pool_timeout,
        )
        # Workflows are re-read through the repository, never lazily refreshed.
        self._sessions = async_sessionmaker(
            self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )
        logger.info(
            f"Opened workflow database {self.settings.database} "
            f"at {self.settings.host}:{self.settings.port}"
        )

    async def close(self) -> None:
        """Dispose the pool."""
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessions = None
        logger.info(f"Closed workflow database {self.settings.database}")

    async def create_tables(self) -> None:
        """Create missing tables. Migrations remain the schema of record."""
        async with self._require_engine().begin() as connection:
            await connection.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """
        Yield a session that commits when the block exits cleanly.

        Any exception rolls the session back and is re-raised.
        """
        self._require_engine()
        session = self._sessions()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()

    def _require_engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Workflow database is not open")
        return self._engine
