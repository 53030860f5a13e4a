"""
Catalog Manager - Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   Creates an async engine, provides a session dependency that commits on
       success and rolls back on error.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at module import; sessions are created per-request.

Every Store operation is a single statement, so the per-request transaction
never spans more than one write. Concurrent writers are serialized by the
storage engine itself; there is no application-level locking.
"""

import logging
from typing import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from catalog.config import settings
from catalog.exceptions import StorageError

logger = logging.getLogger(__name__)


# ── Engine Configuration ──────────────────────────────────────────────────
engine = create_async_engine(settings.database_url, **settings.engine_options())

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: attributes stay readable after commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models (shared metadata for Alembic)."""
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back and re-raises for the global error handler
        5. Always: closes the session (returns connection to pool)

    A failed commit (e.g. "database is locked") becomes a StorageError
    carrying the driver message, like any other Store failure.
    """
    async with async_session_factory() as session:
        try:
            yield session
            try:
                await session.commit()
            except SQLAlchemyError as e:
                logger.error("Commit failed: %s", e)
                raise StorageError.from_driver(e, "commit")
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def init_db() -> None:
    """
    Create missing tables.

    What:  Equivalent of CREATE TABLE IF NOT EXISTS for every registered model.
    When:  Application startup. Alembic migrations remain the way to evolve
           an existing schema; this only covers a fresh database file.
    """
    # Import models so they register with Base.metadata
    from catalog.models import entry  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready (%s)", engine.url.render_as_string(hide_password=True))


async def dispose_engine() -> None:
    """Gracefully closes all connections in the pool (application shutdown)."""
    await engine.dispose()
