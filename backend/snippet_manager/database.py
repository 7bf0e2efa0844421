"""
Snippet Manager Backend: Database Engine, Sessions and Transactions
===================================================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       transaction helper every store operation runs inside.
How:   `transaction()` opens a session, yields it, commits on success and
       rolls back on any exception, so a multi-statement store operation is
       all-or-nothing.
When:  The module-level engine (the default for create_app) is created at
       import; sessions are created per store operation.

Connection Pooling:
    pool_size=20, max_overflow=10, pre-ping on, recycle every hour.
    SQLite URLs (used by the test-suite) skip pool sizing and switch on
    `PRAGMA foreign_keys`, so ON DELETE CASCADE / SET NULL behave as they do
    on PostgreSQL.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from snippet_manager.config import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers with `Base.metadata`, which `init_schema()` uses to
    create the five tables at startup.
    """
    pass


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine configured for the given URL.

    PostgreSQL gets the pooled configuration from settings; SQLite gets
    foreign-key enforcement instead.
    """
    if database_url.startswith("sqlite"):
        engine = create_async_engine(database_url, echo=settings.log_level == "DEBUG")
        event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return engine

    return create_async_engine(
        database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=settings.log_level == "DEBUG",
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: ORM rows stay readable after commit
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False)


engine = build_engine(settings.database_url)


@asynccontextmanager
async def transaction(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncIterator[AsyncSession]:
    """
    Run a block of statements as one all-or-nothing unit.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the caller (the caller issues statements)
        3. On success: commits
        4. On error: rolls back and re-raises
        5. Always: closes the session (returns connection to pool)

    Example:
        async with transaction(factory) as session:
            session.add(snippet)
            await session.execute(insert(snippet_tags).values(...))
    """
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_schema(bind: AsyncEngine) -> None:
    """
    Create all tables that do not exist yet.

    `create_all` checks for each table first, so running this on every
    startup is idempotent.
    """
    # Model modules must be imported so their tables are registered
    from snippet_manager import models  # noqa: F401

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready (%d tables)", len(Base.metadata.tables))


async def dispose_engine(bind: AsyncEngine) -> None:
    """Gracefully close all pooled connections (application shutdown)."""
    await bind.dispose()
