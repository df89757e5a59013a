"""Root pytest configuration and shared fixtures.

Environment overrides are applied before any ``portfolio_cms`` import so the
settings singleton points at in-memory SQLite with Redis caching and rate
limiting switched off.

Provides:
- engine / session_factory / session: in-memory aiosqlite database
- user / other_user / admin: accounts created in ``session``
- make_user: creates an account in its own session (for API tests)
- auth_headers: Bearer header for a user
- api: httpx.AsyncClient bound to the FastAPI app under /api/v1
- upload_dir: temporary upload root
"""

from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["CACHE_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"

from collections.abc import AsyncIterator

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from portfolio_cms.core.config import settings
from portfolio_cms.core.models import Base, User
from portfolio_cms.core.security import create_access_token
from portfolio_cms.services.users import UserService

PASSWORD = "Sup3rSecret!"


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine, class_=AsyncSession, autoflush=False, expire_on_commit=False
    )


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncIterator[AsyncSession]:
    async with session_factory() as session:
        yield session


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
def user_payload(username: str, **extra) -> dict:
    return {
        "username": username,
        "email": f"{username}@portfolio.dev",
        "password": PASSWORD,
        **extra,
    }


@pytest_asyncio.fixture
async def user(session: AsyncSession) -> User:
    return await UserService(session).create_user(
        user_payload("alice", first_name="Alice", last_name="Doe")
    )


@pytest_asyncio.fixture
async def other_user(session: AsyncSession) -> User:
    return await UserService(session).create_user(user_payload("bob"))


@pytest_asyncio.fixture
async def admin(session: AsyncSession) -> User:
    return await UserService(session).create_user(user_payload("root", role="admin"))


@pytest.fixture
def make_user(session_factory):
    """Return a coroutine creating a user in a short-lived session."""

    async def _make(username: str = "alice", **extra) -> User:
        async with session_factory() as session:
            return await UserService(session).create_user(
                user_payload(username, **extra)
            )

    return _make


@pytest.fixture
def password() -> str:
    return PASSWORD


@pytest.fixture
def auth_headers():
    """Return a callable building the Bearer header for a user."""

    def _headers(user: User) -> dict[str, str]:
        token = create_access_token(
            subject=user.id, role=user.role, extra={"username": user.username}
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


# ---------------------------------------------------------------------------
# HTTP
# ---------------------------------------------------------------------------
@pytest_asyncio.fixture
async def api(session_factory) -> AsyncIterator[httpx.AsyncClient]:
    from portfolio_cms.api.deps import get_db
    from portfolio_cms.api.limiter import limiter
    from portfolio_cms.api.main import app

    async def _get_db() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    limiter.enabled = False
    app.dependency_overrides[get_db] = _get_db
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://testserver/api/v1"
    ) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def upload_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "upload_dir", str(tmp_path))
    return tmp_path
