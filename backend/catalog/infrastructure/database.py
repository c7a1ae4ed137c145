"""Database Session Manager — async connection pool with automatic rollback and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - Connection pool uses pool_pre_ping for stale connection detection
    - All SQLAlchemy exceptions mapped to catalog store errors (core/errors.py)
    - Startup connects with a bounded number of retries, then gives up loudly

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
      (ADR: no global import side effects)
    - expire_on_commit=False: prevents lazy-load issues in async context
    - Pool sizing skipped for SQLite: its async pools reject pool_size/max_overflow
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from sqlalchemy.exc import (
    IntegrityError, OperationalError, InterfaceError, DBAPIError, SQLAlchemyError,
)
from sqlalchemy import text

from catalog.core.errors import (
    CatalogError, ConflictError, ErrorContext, StoreError, StoreUnavailableError,
)
from catalog.db.base import Base
import catalog.models  # noqa: F401  (registers tables on Base.metadata)

logger = logging.getLogger(__name__)


def map_db_error(exc: SQLAlchemyError, operation: str) -> CatalogError:
    """Translate a SQLAlchemy exception into the catalog error taxonomy."""
    context = ErrorContext(operation=operation, debug_info={"error": str(exc)})
    if isinstance(exc, IntegrityError):
        return ConflictError("Integrity constraint violated", context=context)
    if isinstance(exc, (OperationalError, InterfaceError)):
        return StoreUnavailableError(context=context)
    if isinstance(exc, DBAPIError):
        return StoreError("Database error", context=context)
    return StoreError("Database operation failed", recoverable=False, context=context)


class DatabaseSessionManager:
    """Manages async database sessions with pooling, rollback, and health checks."""

    def __init__(
        self, database_url: str, pool_size: int = 5, max_overflow: int = 10,
        echo: bool = False,
    ):
        engine_kwargs: dict = {"echo": echo, "pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"DB error: {e}")
            raise map_db_error(e, "session") from e
        finally:
            await session.close()

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def connect_with_retry(
        self, retries: int = 5, delay_seconds: float = 5.0,
    ) -> None:
        """Block startup until the database answers, or raise StoreUnavailableError."""
        for attempt in range(1, retries + 1):
            try:
                async with self.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
                logger.info("Database connection established")
                return
            except (SQLAlchemyError, OSError) as e:
                remaining = retries - attempt
                logger.error(
                    f"Failed to connect to database, retries left: {remaining}: {e}",
                    extra={"attempt": attempt},
                )
                if remaining == 0:
                    raise StoreUnavailableError(
                        "Database unreachable after retries",
                        ErrorContext(operation="connect"),
                    ) from e
                logger.info(f"Waiting {delay_seconds}s before retrying")
                await asyncio.sleep(delay_seconds)

    async def create_schema(self) -> None:
        """Create all tables (local/dev runs without alembic)."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database schema synchronized")

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str, **kwargs) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url, **kwargs)
    return db_manager


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions."""
    if not db_manager:
        raise StoreUnavailableError("Database not initialized")
    async with db_manager.session() as session:
        yield session
