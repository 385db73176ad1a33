"""
PackTrack Backend — Database Session Management
================================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       FastAPI session dependency.
How:   One engine per process (created at import, disposed on shutdown);
       one AsyncSession per request. The dependency commits when the route
       returns normally and rolls back on any exception, so every service
       call that only flushes runs as a single all-or-nothing unit.
Who:   Route handlers via Depends(get_db_session); services receive the
       session explicitly.

Connection Pooling:
    pool_size / max_overflow / pool_pre_ping come from settings and are only
    passed for server databases. SQLite (used in tests through aiosqlite)
    manages its own pool and rejects these arguments.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy import MetaData
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from packtrack.config import settings


def build_engine(database_url: str, **overrides: Any) -> AsyncEngine:
    """
    Create an async engine with pool settings suited to the backend.

    Args:
        database_url: SQLAlchemy async URL (postgresql+asyncpg://, sqlite+aiosqlite://)
        overrides:    Extra keyword arguments forwarded to create_async_engine
                      (tests pass poolclass/connect_args here).
    """
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    options.update(overrides)
    return create_async_engine(database_url, **options)


# ── Engine Configuration ──────────────────────────────────────────────────
engine = build_engine(settings.database_url)

# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: ORM objects stay readable after commit, which the
# response serialization relies on (no lazy IO outside the session).
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


# ── Base Model ────────────────────────────────────────────────────────────
# Constraint names must match the ones created by the Alembic revisions
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "pk": "pk_%(table_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
}


class Base(DeclarativeBase):
    """Base class for all PackTrack ORM models (shared metadata for Alembic)."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back, then re-raises for the exception handlers
        5. Always: closes the session (returns the connection to the pool)

    Example usage in a route:
        @router.get("/packaging")
        async def list_items(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_schema() -> None:
    """
    Create all tables directly from the ORM metadata.

    Used for SQLite development databases and tests; PostgreSQL deployments
    run `alembic upgrade head` instead.
    """
    # Imported for table registration on Base.metadata
    from packtrack import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine() -> None:
    """Gracefully closes all pooled connections (application shutdown)."""
    await engine.dispose()
