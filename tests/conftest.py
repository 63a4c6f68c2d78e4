"""
Todo Backend — Test Configuration (conftest.py)
=================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── test_settings: Settings with cheap argon2 parameters and test credentials
    ├── mock_db_session: Mock AsyncSession (unit tests, no database)
    ├── password_service: Low-cost PasswordService
    ├── database: Fresh in-memory SQLite Database with all tables created
    ├── db_session: AsyncSession bound to `database`
    └── test_client: HTTPX AsyncClient wired to an app using `database`
"""

import os

# Override settings for testing BEFORE any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["SUPABASE_API_KEY"] = "test-key-not-real"
os.environ["SUPABASE_PROJECT_REF"] = "test-project-ref"
os.environ["PASSWORD_HASH_TIME_COST"] = "1"
os.environ["PASSWORD_HASH_MEMORY_COST"] = "8"
os.environ["PASSWORD_HASH_PARALLELISM"] = "1"
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from todo_backend.config import Settings
from todo_backend.database import Database
from todo_backend.services.password_service import PasswordService


class FakeClock:
    """Settable clock for SessionService; always returns an aware UTC datetime."""

    def __init__(self, now: datetime = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def test_settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        supabase_api_key="test-key-not-real",
        supabase_project_ref="test-project-ref",
        password_hash_time_cost=1,
        password_hash_memory_cost=8,
        password_hash_parallelism=1,
        log_level="WARNING",
    )


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_find(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = user
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture
def password_service():
    return PasswordService(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest_asyncio.fixture
async def database():
    """
    In-memory SQLite database with the full schema.

    StaticPool keeps the single in-memory connection alive for the whole test.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    db = Database(engine)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def test_client(test_settings, database):
    """
    Provides an async HTTP test client for endpoint testing.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from todo_backend.main import create_app

    app = create_app(config=test_settings, database=database)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
