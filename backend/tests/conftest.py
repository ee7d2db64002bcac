"""
WayShare Backend - Test Configuration (conftest.py)
====================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy (all function-scoped):
    ├── mock_db_session: AsyncMock session for pure service unit tests
    ├── database:        fresh SQLite schema created from the ORM metadata,
    │                    dropped (and the engine disposed) after the test
    ├── db_session:      AsyncSession on that database
    ├── test_client:     httpx AsyncClient routed into a fresh app instance
    ├── fake_data_dir:   the bundled fixtures/fake-data directory
    └── ride_payload / member_payload / rating_payload: wire-format bodies
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Must run BEFORE any wayshare import: settings and engine are built at import
_DB_DIR = tempfile.mkdtemp(prefix="wayshare_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_DIR}/wayshare_test.db"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RATE_LIMIT_REQUESTS"] = "100000"
os.environ["DEFAULT_PAGE_SIZE"] = "20"

from wayshare.database import Base, async_session_factory, engine  # noqa: E402
import wayshare.models  # noqa: E402,F401

FAKE_DATA_DIR = Path(__file__).resolve().parent.parent / "fixtures" / "fake-data"


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        async def test_find_one(mock_db_session):
            mock_result = MagicMock()
            mock_result.scalar_one_or_none.return_value = None
            mock_db_session.execute.return_value = mock_result
            assert await service.find_one(mock_db_session, 1) is None
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


@pytest_asyncio.fixture
async def database():
    """Create every table before the test and drop them afterwards."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    # Pooled aiosqlite connections are bound to this test's event loop
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def test_client(database):
    """
    HTTPX AsyncClient talking to a fresh FastAPI app over ASGITransport.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from wayshare.main import create_app

    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def fake_data_dir() -> Path:
    return FAKE_DATA_DIR


@pytest.fixture
def member_payload():
    return {
        "login": "alice",
        "passwordHash": "$2a$10$abcdefghijklmnopqrstuv",
        "email": "alice@example.org",
        "activated": True,
    }


@pytest.fixture
def ride_payload():
    return {
        "startLocation": "A",
        "endLocation": "B",
        "startTime": "2024-07-01T08:00:00Z",
    }


@pytest.fixture
def rating_payload():
    return {"score": 4, "feedback": "Smooth ride"}
