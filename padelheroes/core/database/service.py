"""
Database Service - async engine and session management.

Every SQL store operation borrows a session from here:

- `get_session()`: read-only session, closed on exit
- `get_transaction()`: one short atomic unit; commit on success,
  rollback and re-raise on any exception

The check-in engine never needs a transaction spanning more than one row.
Cross-row consistency comes from the ledger uniqueness constraint and the
atomic score increment (see `padelheroes.store.sql`), so the same code stays
correct on stores without multi-row transactions.

Engines
-------
- PostgreSQL (asyncpg): QueuePool with pre-ping and a per-transaction
  `SET LOCAL statement_timeout`
- SQLite (aiosqlite): NullPool, busy timeout taken from the statement timeout
- ENVIRONMENT=testing always uses NullPool

Driver errors propagate untouched; the store adapters map them to
StorageError. Schema changes beyond `create_all()` bootstrap are out of
scope here.

>>> await DatabaseService.initialize()
>>> async with DatabaseService.get_transaction() as session:
...     session.add(record)
"""

from __future__ import annotations

import asyncio
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncGenerator, Dict, Optional, Type

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool, Pool, QueuePool

from padelheroes.core.config.config import Config
from padelheroes.core.exceptions import ConfigurationError, DatabaseNotInitializedError
from padelheroes.core.logging.logger import get_logger

logger = get_logger(__name__)


# ============================================================================
# Engine settings
# ============================================================================


@dataclass(frozen=True)
class _EngineSettings:
    """Database settings frozen at initialize() time."""

    url: str
    echo: bool
    pool_class: Type[Pool]
    pool_size: int
    max_overflow: int
    pool_recycle: int
    pool_timeout: int
    statement_timeout_ms: int

    @classmethod
    def resolve(cls, url: Optional[str] = None) -> "_EngineSettings":
        """
        Read the database settings from Config.

        Raises:
            ConfigurationError: DATABASE_URL is missing or blank
        """
        database_url = url or Config.DATABASE_URL
        if not isinstance(database_url, str) or not database_url.strip():
            raise ConfigurationError("DATABASE_URL", "must be a non-empty SQLAlchemy URL")

        pooled = not (Config.is_testing() or database_url.startswith("sqlite"))
        return cls(
            url=database_url,
            echo=Config.DATABASE_ECHO,
            pool_class=QueuePool if pooled else NullPool,
            pool_size=Config.DATABASE_POOL_SIZE,
            max_overflow=Config.DATABASE_MAX_OVERFLOW,
            pool_recycle=Config.DATABASE_POOL_RECYCLE,
            pool_timeout=Config.DATABASE_POOL_TIMEOUT,
            statement_timeout_ms=Config.DATABASE_STATEMENT_TIMEOUT_MS,
        )

    @property
    def is_postgres(self) -> bool:
        return self.url.startswith(("postgresql://", "postgresql+asyncpg://"))

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def url_scheme(self) -> str:
        return self.url.split(":", 1)[0] if ":" in self.url else "unknown"

    def engine_kwargs(self) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"echo": self.echo, "poolclass": self.pool_class}
        if self.pool_class is QueuePool:
            kwargs.update(
                pool_size=self.pool_size,
                max_overflow=self.max_overflow,
                pool_recycle=self.pool_recycle,
                pool_timeout=self.pool_timeout,
                pool_pre_ping=True,
            )
        if self.is_sqlite:
            # sqlite3 busy timeout, in seconds
            kwargs["connect_args"] = {"timeout": self.statement_timeout_ms / 1000.0}
        return kwargs


# ============================================================================
# DatabaseService
# ============================================================================


class DatabaseService:
    """
    Process-wide engine and session factory (class-level state).

    Public API: initialize(), shutdown(), is_initialized(), create_all(),
    health_check(), get_session(), get_transaction().
    """

    _engine: Optional[AsyncEngine] = None
    _session_factory: Optional[async_sessionmaker[AsyncSession]] = None
    _settings: Optional[_EngineSettings] = None
    _init_lock: Optional[asyncio.Lock] = None

    # ========================================================================
    # Initialization & Shutdown
    # ========================================================================

    @classmethod
    def _lock(cls) -> asyncio.Lock:
        # Created lazily so the lock binds to the running loop
        if cls._init_lock is None:
            cls._init_lock = asyncio.Lock()
        return cls._init_lock

    @classmethod
    async def initialize(cls, url: Optional[str] = None) -> None:
        """
        Create the engine and session factory. Idempotent.

        Args:
            url: Optional override of Config.DATABASE_URL
        """
        async with cls._lock():
            if cls._engine is not None:
                logger.debug("DatabaseService already initialized; skipping")
                return

            try:
                settings = _EngineSettings.resolve(url)
            except ConfigurationError:
                logger.error("DATABASE_URL is not configured")
                raise

            try:
                engine = create_async_engine(settings.url, **settings.engine_kwargs())
            except Exception as exc:
                logger.error(
                    "Database engine creation failed",
                    extra={
                        "url_scheme": settings.url_scheme,
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                    },
                    exc_info=True,
                )
                raise ConfigurationError("DATABASE_URL", f"engine creation failed: {exc}") from exc

            cls._engine = engine
            cls._session_factory = async_sessionmaker(
                bind=engine, class_=AsyncSession, expire_on_commit=False
            )
            cls._settings = settings

            logger.info(
                "DatabaseService initialized",
                extra={
                    "url_scheme": settings.url_scheme,
                    "pool_class": settings.pool_class.__name__,
                    "statement_timeout_ms": settings.statement_timeout_ms,
                },
            )

    @classmethod
    async def shutdown(cls) -> None:
        """
        Dispose the engine and reset internal state.

        Safe to call multiple times; no-op if already shut down.
        """
        async with cls._lock():
            if cls._engine is None:
                logger.debug("DatabaseService not initialized; nothing to shutdown")
                return

            logger.info("Shutting down DatabaseService")

            try:
                await cls._engine.dispose()
                logger.info("DatabaseService shutdown complete")
            finally:
                cls._engine = None
                cls._session_factory = None
                cls._settings = None

    @classmethod
    def is_initialized(cls) -> bool:
        return cls._engine is not None

    # ========================================================================
    # Schema bootstrap
    # ========================================================================

    @classmethod
    async def create_all(cls) -> None:
        """Create all tables known to the ORM metadata (no-op for existing ones)."""
        cls._ensure_initialized()
        assert cls._engine is not None

        from padelheroes.database.models import Base

        async with cls._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info(
            "Database schema ensured",
            extra={"tables": sorted(Base.metadata.tables)},
        )

    # ========================================================================
    # Health Check
    # ========================================================================

    @classmethod
    async def health_check(cls) -> bool:
        """
        Perform a lightweight `SELECT 1`.

        Never raises; returns False when the database is unreachable.
        """
        if cls._engine is None:
            logger.warning("Health check called on uninitialized DatabaseService")
            return False

        start = time.perf_counter()
        success = False

        try:
            async with cls._engine.begin() as conn:
                await conn.execute(text("SELECT 1"))
            success = True
            return True

        except (OperationalError, DBAPIError, OSError) as exc:
            logger.warning(
                "Database health check failed",
                extra={
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
            )
            return False

        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            logger.debug(
                "Database health check completed",
                extra={"success": success, "duration_ms": duration_ms},
            )

    # ========================================================================
    # Session & Transaction Context Managers
    # ========================================================================

    @classmethod
    def _ensure_initialized(cls) -> None:
        if cls._session_factory is None or cls._engine is None:
            logger.error("DatabaseService operation attempted before initialization")
            raise DatabaseNotInitializedError(
                "DatabaseService must be initialized before use. "
                "Call DatabaseService.initialize() during startup."
            )

    @classmethod
    async def _apply_statement_timeout(cls, session: AsyncSession) -> None:
        settings = cls._settings
        if settings is not None and settings.is_postgres:
            await session.execute(
                text(f"SET LOCAL statement_timeout = {settings.statement_timeout_ms}")
            )

    @classmethod
    @asynccontextmanager
    async def get_session(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Create a database session without automatic commit.

        For read-only operations. The session is closed on exit.
        """
        cls._ensure_initialized()
        assert cls._session_factory is not None

        start = time.perf_counter()
        async with cls._session_factory() as session:
            try:
                await cls._apply_statement_timeout(session)
                yield session
            finally:
                await session.close()
                logger.debug(
                    "Database session closed",
                    extra={"duration_ms": (time.perf_counter() - start) * 1000.0},
                )

    @classmethod
    @asynccontextmanager
    async def get_transaction(cls) -> AsyncGenerator[AsyncSession, None]:
        """
        Create a database session wrapped in an atomic transaction.

        Commits on success; rolls back and re-raises on any exception.
        Never call `session.commit()` inside the block.
        """
        cls._ensure_initialized()
        assert cls._session_factory is not None

        start = time.perf_counter()
        async with cls._session_factory() as session:
            try:
                await cls._apply_statement_timeout(session)
                yield session
                await session.commit()
                logger.debug(
                    "Database transaction committed",
                    extra={"duration_ms": (time.perf_counter() - start) * 1000.0},
                )

            except Exception as exc:
                await session.rollback()
                logger.debug(
                    "Database transaction rolled back",
                    extra={
                        "error": str(exc),
                        "error_type": type(exc).__name__,
                        "duration_ms": (time.perf_counter() - start) * 1000.0,
                    },
                )
                raise

            finally:
                await session.close()
