"""
Alembic Migration Environment
===============================

What:  Runs the todo_backend schema migrations (users, sessions, todos).
How:   The URL comes from todo_backend.config (DATABASE_URL, with plain
       postgres:// URLs already rewritten to asyncpg) unless overridden on the
       command line:

           alembic -x db_url=sqlite+aiosqlite:///./local.db upgrade head

       Online migrations go through the same async engine kind the app uses.
       SQLite targets run in batch mode.
"""

import asyncio
from logging.config import fileConfig

from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import create_async_engine

from alembic import context

from todo_backend.config import settings
from todo_backend.database import Base

# Registers the three tables on Base.metadata for --autogenerate.
from todo_backend.models import session, todo, user  # noqa: F401

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def _database_url() -> str:
    return context.get_x_argument(as_dictionary=True).get("db_url") or settings.database_url


def _configure(**kwargs) -> None:
    url = kwargs.get("url") or _database_url()
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        render_as_batch=url.startswith("sqlite"),
        **kwargs,
    )


def run_migrations_offline() -> None:
    """Emit SQL to stdout without connecting to the database."""
    _configure(
        url=_database_url(),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    _configure(connection=connection)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    """Apply pending migrations over a single unpooled connection."""
    engine = create_async_engine(_database_url(), poolclass=pool.NullPool)
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
