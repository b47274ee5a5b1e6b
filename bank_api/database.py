"""
Database engine, session management, and base model class.

This module sets up SQLAlchemy 2.0 with async support. Key components:

  - init_engine() / dispose_engine(): explicit lifecycle for the process-wide
    connection pool, called from the FastAPI lifespan (startup/shutdown)
  - Base: Declarative base class that all ORM models inherit from
  - get_db(): FastAPI dependency that provides a session per request
  - unit_of_work(): the atomic unit every balance mutation runs inside

Architecture note:
  We use async SQLAlchemy (with aiosqlite for SQLite) so the API can handle
  concurrent requests without blocking. When migrating to PostgreSQL, only
  the DATABASE_URL needs to change (to use the asyncpg driver).

Session lifecycle:
  Each API request gets its own session via get_db(). The session commits
  on success and rolls back on ANY exception, so a failed request never
  leaves partial state behind.
"""

import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from bank_api.config import settings
from bank_api.exceptions import StorageError

logger = logging.getLogger(__name__)

engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All models inherit from this class, which provides metadata tracking
    for table creation and the common declarative mapping features.
    """
    pass


def make_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False prevents lazy-load errors after commit:
    # without it, touching an attribute on a committed object would trigger
    # a synchronous DB call, which fails in async context.
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


def init_engine(database_url: str | None = None) -> AsyncEngine:
    """
    Create the process-wide async engine and session factory.

    For SQLite, `timeout` is the busy timeout: a writer waits this long for
    another connection's write transaction to finish instead of failing
    immediately with "database is locked".
    """
    global engine, AsyncSessionLocal

    url = database_url or settings.DATABASE_URL
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["timeout"] = settings.DB_CONNECT_TIMEOUT

    engine = create_async_engine(url, echo=settings.DEBUG, connect_args=connect_args)
    AsyncSessionLocal = make_session_factory(engine)
    logger.info("Database engine initialised for %s", engine.url.render_as_string(hide_password=True))
    return engine


async def dispose_engine() -> None:
    """Close every pooled connection. Called once at shutdown."""
    global engine, AsyncSessionLocal

    if engine is not None:
        await engine.dispose()
        logger.info("Database engine disposed")
    engine = None
    AsyncSessionLocal = None


async def get_db():
    """
    FastAPI dependency that provides a database session.

    Usage in a route:
        @router.get("/items")
        async def list_items(db: AsyncSession = Depends(get_db)):
            ...

    The session is committed on success and rolled back on any exception,
    then closed when the request completes.
    """
    if AsyncSessionLocal is None:
        raise RuntimeError("Database engine is not initialised; call init_engine() first")

    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def unit_of_work(db: AsyncSession):
    """
    Run a block of reads and writes as one all-or-nothing database transaction.

    On normal exit the session's transaction is committed. On any exception
    it is rolled back, so nothing written inside the block survives. Errors
    raised by SQLAlchemy itself (constraint violations, lock timeouts, lost
    connections, commit failures) are reported as StorageError; domain
    errors propagate unchanged.

    Usage:
        async with unit_of_work(db):
            ...
    """
    try:
        yield db
        await db.commit()
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Atomic unit aborted by the storage layer")
        raise StorageError() from exc
    except Exception:
        await db.rollback()
        raise
