"""
DevConnector Backend - Test Configuration (conftest.py)
========================================================

What:  Shared pytest fixtures for the whole suite.
How:   Every test gets a fresh in-memory SQLite database (aiosqlite with
       StaticPool, so all sessions share one connection) built from the ORM
       metadata. HTTP tests drive a fresh app over httpx's ASGITransport with
       the session dependency pointed at that database.

Fixture Hierarchy:
    engine ─┬─ session_factory ─┬─ db_session
            │                   ├─ users (alice, bob, carol)
            │                   └─ test_client
            └─ (dropped after each test)
"""

import os

# Must be set before anything imports devconnector.config
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-not-for-production-use-only"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["GITHUB_CLIENT_ID"] = ""
os.environ["GITHUB_CLIENT_SECRET"] = ""

from types import SimpleNamespace
from typing import AsyncGenerator, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from devconnector.auth import create_access_token
from devconnector.database import Base, get_db_session
from devconnector.models import User


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def users(session_factory) -> SimpleNamespace:
    """
    Three committed accounts: alice, bob and carol.

    Usage:
        async def test_x(users):
            users.alice.id
    """
    async with session_factory() as session:
        alice = User(name="Alice", email="alice@example.com", avatar="//gravatar/alice")
        bob = User(name="Bob", email="bob@example.com", avatar="//gravatar/bob")
        carol = User(name="Carol", email="carol@example.com")
        session.add_all([alice, bob, carol])
        await session.commit()
    return SimpleNamespace(alice=alice, bob=bob, carol=carol)


# ══════════════════════════════════════════════════════════════════════════
# HTTP Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def auth_headers():
    """
    Returns a helper that builds an Authorization header for a user.

    Usage:
        await test_client.get("/api/profile/me", headers=auth_headers(users.alice))
    """

    def _headers(user: User) -> Dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


@pytest.fixture
def make_app(session_factory):
    """Builds a fresh app whose requests use the test database."""
    from devconnector.main import create_app

    async def override_get_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    def _make():
        app = create_app()
        app.dependency_overrides[get_db_session] = override_get_db_session
        return app

    return _make


@pytest_asyncio.fixture
async def test_client(make_app) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTPX AsyncClient talking to the app in-process.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
    """
    transport = ASGITransport(app=make_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
