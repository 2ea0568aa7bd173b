"""Database Session Manager — async engine, sessions that roll back, StorageError mapping.

Invariants:
    - A session that raises is rolled back before the error leaves session()
    - SQLAlchemy failures leave as StorageError; nothing above infrastructure/
      sees a driver exception
    - Pool sizing applies to server databases only; SQLite keeps the dialect default

Design Decisions:
    - Built in the FastAPI lifespan and kept on app.state, never at import time
    - expire_on_commit=False: rows stay readable after commit in async code
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

from lessonbook.core.errors import StorageError
from lessonbook.db.base import Base

logger = logging.getLogger(__name__)

# most specific first: IntegrityError and OperationalError are DBAPIErrors
_ERROR_MAP: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "Stored slot rejected by the database", "write"),
    (OperationalError, "Database unavailable", "connect"),
    (DBAPIError, "Database driver error", "query"),
)


def _to_storage_error(exc: SQLAlchemyError) -> StorageError:
    for exc_type, message, operation in _ERROR_MAP:
        if isinstance(exc, exc_type):
            return StorageError(message, operation)
    return StorageError("Database operation failed", "unknown")


class DatabaseSessionManager:
    """Owns the engine and hands out sessions for the slot store."""

    def __init__(
        self, database_url: str, pool_size: int = 5, max_overflow: int = 5,
    ):
        options: dict = {"pool_pre_ping": True}
        if not database_url.startswith("sqlite"):
            options.update(
                pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
            )
        self.engine = create_async_engine(database_url, **options)
        self._session_factory = async_sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            error = _to_storage_error(e)
            logger.error(
                f"{error.message}: {e}", extra={"error_code": error.code},
            )
            raise error from e
        finally:
            await session.close()

    async def create_schema(self) -> None:
        """Create missing tables for installs that never ran alembic."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
        except StorageError:
            return False
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()
