"""
Recipe Book Backend — Test Configuration (conftest.py)
=======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all tests.

Fixture Hierarchy:
    Function-scoped (created fresh for each test):
    ├── database: creates the tables on a temporary SQLite file, drops them after
    │   ├── db_session: a real AsyncSession on that database
    │   ├── session_factory: opens one session per step (like separate requests)
    │   └── test_client: HTTPX AsyncClient on a fresh app with a fake verifier
    ├── mock_db_session: Mock database session (no real DB needed)
    └── fake_verifier: FakeTokenVerifier with alice, bob and carol
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports: the engine is built
# from DATABASE_URL when app.database is first imported.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="recipebook_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_TEST_DB_DIR, 'test.db')}"
os.environ["AUTH_MODE"] = "firebase"
os.environ["FIREBASE_PROJECT_ID"] = "recipe-book-test"
os.environ["REQUIRE_VERIFIED_OWNERSHIP"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"  # Reduce noise during tests

from typing import Dict, Optional  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from app.database import Base, async_session_factory, engine  # noqa: E402
from app.exceptions import InvalidTokenError  # noqa: E402
from app.models import recipe as recipe_models  # noqa: E402,F401
from app.security import get_token_verifier  # noqa: E402
from app.services.token_verifier_base import AuthenticatedUser, TokenVerifier  # noqa: E402


ALICE = AuthenticatedUser(uid="alice-uid", email="alice@example.com", name="Alice A.")
BOB = AuthenticatedUser(uid="bob-uid", email="bob@example.com", name="Bob B.")
# No email claim: userName falls back to the name claim
CAROL = AuthenticatedUser(uid="carol-uid", name="Carol")


class FakeTokenVerifier(TokenVerifier):
    """Maps opaque test tokens ("token-alice", ...) to fixed identities."""

    def __init__(self, users: Optional[Dict[str, AuthenticatedUser]] = None):
        self.users = users or {
            "token-alice": ALICE,
            "token-bob": BOB,
            "token-carol": CAROL,
        }
        self.calls = []

    async def verify(self, token: str) -> AuthenticatedUser:
        self.calls.append(token)
        user = self.users.get(token)
        if user is None:
            raise InvalidTokenError(reason="Token not recognised by test verifier")
        return user


def bearer(token: str) -> Dict[str, str]:
    """Authorization header for a test token."""
    return {"Authorization": f"Bearer {token}"}


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def database():
    """
    Fresh schema for every test.

    The engine is disposed at teardown so no pooled aiosqlite connection
    outlives the event loop of the test that opened it.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with async_session_factory() as session:
        yield session


@pytest.fixture
def session_factory(database):
    """
    The application's session factory.

    Use one `async with session_factory() as s:` block per step to mimic
    separate requests (each one sees committed state only).
    """
    return async_session_factory


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        async def test_get_recipe(mock_db_session):
            mock_db_session.execute.return_value.scalar_one_or_none.return_value = recipe
            result = await recipe_service.get_by_id(mock_db_session, recipe_id)
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
# API Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def fake_verifier():
    return FakeTokenVerifier()


@pytest_asyncio.fixture
async def test_client(database, fake_verifier):
    """
    Provides an async HTTP test client for endpoint testing.

    A new app is built per test so dependency overrides never leak. The
    lifespan does not run under ASGITransport; the database fixture stands in
    for the startup ping.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    from app.main import create_app

    app = create_app()
    app.dependency_overrides[get_token_verifier] = lambda: fake_verifier
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
