"""Async engine and session management for the record store."""

import threading
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Optional

import structlog
from sqlalchemy import event
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from bakeline.core.config import Settings, get_settings
from bakeline.db.models import Base

logger = structlog.get_logger(__name__)

SQLITE_PRAGMAS = (
    "PRAGMA journal_mode=WAL",
    "PRAGMA busy_timeout=5000",
)


def _apply_sqlite_pragmas(dbapi_conn: Any, connection_record: Any) -> None:
    cursor = dbapi_conn.cursor()
    for pragma in SQLITE_PRAGMAS:
        cursor.execute(pragma)
    cursor.close()


class DatabaseConfig:
    """Lazily built engine and session factory for one database URL.

    SQLite (the default store for a single line) runs without a connection
    pool and in WAL mode so the API and Alembic can share the file. Server
    databases get a small pre-pinged pool.
    """

    def __init__(
        self,
        database_url: str = "sqlite+aiosqlite:///./bakeline.db",
        echo: bool = False,
    ) -> None:
        self.database_url = database_url
        self.backend = make_url(database_url).get_backend_name()
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "DatabaseConfig":
        return cls(database_url=settings.database_url, echo=settings.database_echo)

    @property
    def is_sqlite(self) -> bool:
        return self.backend == "sqlite"

    def _engine_options(self) -> dict[str, Any]:
        if self.is_sqlite:
            return {"echo": self.echo, "poolclass": NullPool}
        return {
            "echo": self.echo,
            "pool_size": 5,
            "max_overflow": 10,
            "pool_recycle": 3600,
            "pool_pre_ping": True,
        }

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(self.database_url, **self._engine_options())
            if self.is_sqlite:
                event.listen(self._engine.sync_engine, "connect", _apply_sqlite_pragmas)
            logger.info("database_engine_created", backend=self.backend)
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._session_factory = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
            )
        return self._session_factory

    async def create_tables(self) -> None:
        """Create missing tables.

        Covers first runs and tests; schema changes go through Alembic.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_tables(self) -> None:
        """Drop every table. Destroys all stored records."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Unit-of-work session: commit on success, roll back on error.

        Example:
            async with db_config.session() as session:
                repo = RecordRepository(session)
                await repo.create_from_payload(payload)
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise


_db_config: Optional[DatabaseConfig] = None
_db_lock = threading.Lock()


def get_database() -> DatabaseConfig:
    """Process-wide database configuration, built from settings on first use."""
    global _db_config
    if _db_config is None:
        with _db_lock:
            if _db_config is None:
                _db_config = DatabaseConfig.from_settings(get_settings())
    return _db_config


def set_database(config: Optional[DatabaseConfig]) -> None:
    """Swap the process-wide configuration; None rebuilds it from settings."""
    global _db_config
    with _db_lock:
        _db_config = config


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding a unit-of-work session."""
    async with get_database().session() as session:
        yield session
