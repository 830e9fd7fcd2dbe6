"""Shared test fixtures."""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# The module-level app in habitladder.main needs a database URL at import time.
os.environ.setdefault("HL_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["HL_ADMIN_EMAILS"] = '["admin@example.com"]'
os.environ["HL_LOG_FORMAT"] = "console"

from habitladder.auth.jwt import create_session_token  # noqa: E402
from habitladder.config import Settings, get_settings  # noqa: E402
from habitladder.db.models import User  # noqa: E402
from habitladder.main import create_app  # noqa: E402

ADMIN_EMAIL = "admin@example.com"


@pytest.fixture
def settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Settings:
    """Settings pointing at a fresh SQLite file for this test."""
    monkeypatch.setenv("HL_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'habitladder.db'}")
    get_settings.cache_clear()
    yield get_settings()
    get_settings.cache_clear()


@pytest_asyncio.fixture
async def app(settings: Settings) -> AsyncGenerator[FastAPI, None]:
    """Application with its schema created; the database is closed afterwards."""
    application = create_app(settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.close()


def _client(app: FastAPI, token: str | None = None) -> AsyncClient:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test", headers=headers)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Anonymous HTTP client."""
    async with _client(app) as ac:
        yield ac


@pytest_asyncio.fixture
async def db_session(app: FastAPI) -> AsyncGenerator[AsyncSession, None]:
    """Direct database session for setup and assertions."""
    async with app.state.database.session() as session:
        yield session


async def make_user(db: AsyncSession, name: str, email: str) -> User:
    """Insert a user row directly (no password hashing)."""
    user = User(name=name, email=email, password_hash="not-a-real-hash")
    db.add(user)
    await db.commit()
    return user


def token_for(user: User) -> str:
    return create_session_token(user.id, user.name, user.email)


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "Test User", "user@example.com")


@pytest_asyncio.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, "Admin", ADMIN_EMAIL)


@pytest_asyncio.fixture
async def authed_client(app: FastAPI, user: User) -> AsyncGenerator[AsyncClient, None]:
    """Client carrying a regular user's session token."""
    async with _client(app, token_for(user)) as ac:
        yield ac


@pytest_asyncio.fixture
async def admin_client(app: FastAPI, admin_user: User) -> AsyncGenerator[AsyncClient, None]:
    """Client carrying the administrator's session token."""
    async with _client(app, token_for(admin_user)) as ac:
        yield ac


@pytest.fixture
def client_for(app: FastAPI):
    """Factory for extra authenticated clients (caller closes them)."""

    def factory(user: User) -> AsyncClient:
        return _client(app, token_for(user))

    return factory


@pytest.fixture
def user_factory(db_session: AsyncSession):
    """Create extra users: ``await user_factory("Name", "email")``."""

    async def factory(name: str, email: str) -> User:
        return await make_user(db_session, name, email)

    return factory
