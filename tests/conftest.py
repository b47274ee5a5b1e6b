"""
Test fixtures for the Bank API test suite.

This module provides shared fixtures used across all test files:

  - db_engine / db_session: Fresh in-memory SQLite database for each test
  - file_engine: File-backed SQLite database, for tests that need several
    real connections writing at the same time
  - client: Async HTTP test client (unauthenticated)
  - make_user: Registers a user through the API and returns auth headers
  - authenticated_client: Test client with a pre-registered user and JWT
  - make_account: Inserts a user + account directly, for service-level tests

Key design decisions:
  - In-memory SQLite (sqlite+aiosqlite://) is used for speed and isolation.
    Each test gets a completely fresh database.
  - We override FastAPI's get_db dependency to inject our test sessions,
    so the application code works exactly as it does in production.
  - The lifespan is not run by ASGITransport, so the production engine is
    never created during tests.
"""

import os

# Must be set before bank_api.config is imported
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import create_async_engine

from bank_api.database import Base, get_db, make_session_factory
from bank_api.main import app
from bank_api.models.account import Account
from bank_api.models.profile import Profile
from bank_api.models.user import User


# In-memory SQLite for fast, isolated tests
TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def file_engine(tmp_path):
    """
    Engine on a temporary SQLite file.

    Unlike the in-memory database (one shared connection), every session
    here gets its own connection, so concurrent sessions really do compete
    for the database write lock.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'bank.db'}",
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Provide an async session bound to the test engine."""
    async with make_session_factory(db_engine)() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_engine):
    """
    Async HTTP test client with the test database injected.

    This overrides the get_db dependency so all requests hit the
    in-memory test database instead of the real one.
    """
    async_session = make_session_factory(db_engine)

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(client):
    """
    Factory fixture: register a user via the real endpoint and return the
    Authorization headers for them.
    """

    async def _make_user(email: str, name: str = "Test User") -> dict:
        response = await client.post(
            "/auth/register",
            json={
                "name": name,
                "email": email,
                "password": "SecurePass123!",
                "identity_type": "passport",
                "identity_number": "P0000001",
                "address": "1 Test Street",
            },
        )
        assert response.status_code == 201, f"Register failed: {response.text}"
        return {"Authorization": f"Bearer {response.json()['token']}"}

    return _make_user


@pytest_asyncio.fixture
async def authenticated_client(client, make_user):
    """
    Test client with a pre-registered user and JWT token.

    Registers testuser@example.com, then sets the Authorization header on
    the client for all subsequent requests.
    """
    client.headers.update(await make_user("testuser@example.com"))
    return client


@pytest.fixture
def make_account():
    """
    Factory fixture for service-level tests: insert an account with a given
    balance (and a throwaway owner) straight into the database.
    """
    counter = 0

    async def _make_account(session, balance_cents: int = 0, user_id: int | None = None) -> int:
        nonlocal counter
        counter += 1
        if user_id is None:
            user = User(
                name=f"Owner {counter}",
                email=f"owner{counter}@example.com",
                hashed_password="not-a-real-hash",
                profile=Profile(identity_type="passport", identity_number=f"P{counter}", address="x"),
            )
            session.add(user)
            await session.flush()
            user_id = user.id
        account = Account(
            user_id=user_id,
            bank_name="Test Bank",
            bank_account_number=f"ACC{counter:07d}",
            balance_cents=balance_cents,
        )
        session.add(account)
        await session.commit()
        return account.id

    return _make_account


async def balance_of(session, account_id: int) -> int:
    """Read a balance straight from the database, bypassing the identity map."""
    result = await session.execute(
        select(Account.balance_cents).where(Account.id == account_id)
    )
    return result.scalar_one()


@pytest.fixture
def read_balance():
    return balance_of
