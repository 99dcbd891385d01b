"""
SentenceBoard Backend - Test Configuration (conftest.py)
==========================================================

What:  Shared pytest fixtures for the entire test suite.
How:   The environment is pointed at a throwaway SQLite file BEFORE any
       `app` module is imported, since app.config reads it at import time.

Fixtures:
    mock_db_session: AsyncMock standing in for AsyncSession (unit tests)
    db_schema:       creates all tables for one test, drops them afterwards
    db_session:      a real AsyncSession on the test database
    make_account:    registers a local account directly through the service
    test_client:     HTTPX AsyncClient bound to the ASGI app
    client_factory:  additional independent clients (one cookie jar each)
    login:           posts the login form with a client
"""

import os
import tempfile
from contextlib import AsyncExitStack
from unittest.mock import AsyncMock, MagicMock

# ══════════════════════════════════════════════════════════════════════════
# Environment Setup (before any app import)
# ══════════════════════════════════════════════════════════════════════════

_DB_FILE = os.path.join(tempfile.mkdtemp(prefix="sentenceboard_test_"), "test.db")

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_DB_FILE}"
os.environ["SESSION_SECRET"] = "test-session-secret-not-real"
os.environ["GOOGLE_CLIENT_ID"] = ""
os.environ["GOOGLE_CLIENT_SECRET"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.database import Base, async_session_factory, engine  # noqa: E402
from app.models.account import Account  # noqa: E402,F401
from app.models.sentence import Sentence  # noqa: E402,F401
from app.models.session import LoginSession  # noqa: E402,F401
from app.services.account_service import account_service  # noqa: E402

DEFAULT_PASSWORD = "correct horse battery"


# ══════════════════════════════════════════════════════════════════════════
# Unit-test fixtures (no database)
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def mock_db_session():
    """
    A MagicMock that simulates AsyncSession behavior.

    Usage:
        mock_db_session.execute.return_value.scalar_one_or_none.return_value = row
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.flush = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.delete = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Database fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def db_schema():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest_asyncio.fixture
async def db_session(db_schema):
    async with async_session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def make_account(db_schema):
    """
    Factory for committed local accounts.

    Usage:
        alice = await make_account("alice")
    """

    async def _make(username: str, email: str = None, password: str = DEFAULT_PASSWORD):
        async with async_session_factory() as session:
            account = await account_service.register_local(
                session,
                username,
                email or f"{username.lower()}@example.com",
                password,
            )
            await session.commit()
            return account

    return _make


# ══════════════════════════════════════════════════════════════════════════
# HTTP fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def client_factory(db_schema):
    """Each call returns a new AsyncClient with its own cookie jar."""
    from app.main import app

    async with AsyncExitStack() as stack:

        async def _new_client() -> AsyncClient:
            transport = ASGITransport(app=app)
            return await stack.enter_async_context(
                AsyncClient(transport=transport, base_url="http://test")
            )

        yield _new_client


@pytest_asyncio.fixture
async def test_client(client_factory):
    """
    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    return await client_factory()


@pytest.fixture
def login():
    async def _login(client: AsyncClient, username: str, password: str = DEFAULT_PASSWORD):
        response = await client.post(
            "/auth/login",
            data={"username": username, "password": password},
        )
        assert response.status_code == 303, response.text
        assert response.headers["location"] == "/auth/dashboard"
        return response

    return _login
