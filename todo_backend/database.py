"""
Todo Backend — Database Session Management
============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
How:   `Database` owns one pooled async engine and hands out one session per
       request. The instance is created by the app factory and stored on
       `app.state`, so every store receives its datastore handle through
       dependency injection rather than a module-level global.
Who:   Used by route handlers via FastAPI's dependency injection system, by the
       health check, and by the maintenance sweep.

Connection Pooling (PostgreSQL):
    pool_size / max_overflow:  from settings (default 20 + 10)
    pool_pre_ping:             validates connections before checkout
    pool_recycle=3600:         recycles connections every hour

    SQLite URLs (tests, local experiments) get no pool arguments; SQLAlchemy
    picks the right pool class for them.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from todo_backend.config import Settings, settings as default_settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object used by create_all() and by Alembic.
    """
    pass


def build_engine(config: Optional[Settings] = None) -> AsyncEngine:
    """Creates the async engine described by the settings."""
    config = config or default_settings
    url = config.database_url

    if url.startswith("sqlite"):
        return create_async_engine(url, echo=config.log_level == "DEBUG")

    return create_async_engine(
        url,
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        pool_pre_ping=config.db_pool_pre_ping,
        pool_recycle=3600,
        echo=config.log_level == "DEBUG",
    )


class Database:
    """
    Datastore handle: one engine plus its session factory.

    expire_on_commit=False keeps loaded attributes readable after the stores
    commit their own writes.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, config: Optional[Settings] = None) -> "Database":
        return cls(build_engine(config))

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Yields a session; commits on success, rolls back on error, always closes.

        Raises:
            Whatever the consumer raised, after the rollback.
        """
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    async def create_all(self) -> None:
        """Creates every table registered on Base.metadata (tests, local dev)."""
        # Model modules must be imported for their tables to be registered.
        from todo_backend.models import session, todo, user  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> None:
        """Runs SELECT 1; raises if the database is unreachable."""
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        """Closes all pooled connections (application shutdown)."""
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    Example usage in a route:
        @router.get("/todos")
        async def list_todos(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session
