# tests/conftest.py

from __future__ import annotations

import os

# Application modules read these at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("JWT_SECRET", "test-secret-0123456789abcdef0123456789abcdef")
os.environ.setdefault("CORS_ORIGINS", "http://localhost:3000")

from typing import AsyncIterator  # noqa: E402

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import SQLModel  # noqa: E402
from sqlmodel.ext.asyncio.session import AsyncSession  # noqa: E402

import models  # noqa: E402,F401
from database import get_session  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture()
async def engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory database per test, shared by every session on it."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    async with AsyncSession(engine, expire_on_commit=False) as session:
        yield session


@pytest.fixture()
async def client(engine: AsyncEngine) -> AsyncIterator[AsyncClient]:
    """HTTP client against the app, with get_session bound to the test database."""

    async def _get_test_session() -> AsyncIterator[AsyncSession]:
        async with AsyncSession(engine, expire_on_commit=False) as session:
            yield session

    app.dependency_overrides[get_session] = _get_test_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as ac:
        yield ac
    app.dependency_overrides.clear()


class ExplodingSession:
    """Stand-in session that fails the test on any use."""

    def __getattr__(self, name: str):
        raise AssertionError(f"store was touched: session.{name}")


@pytest.fixture()
async def no_store_client(client: AsyncClient) -> AsyncClient:
    """Client whose requests fail the test if they reach the store."""

    async def _get_exploding_session():
        yield ExplodingSession()

    app.dependency_overrides[get_session] = _get_exploding_session
    return client


async def register(
    client: AsyncClient,
    email: str,
    name: str = "Alice",
    password: str = "secret123",
) -> dict:
    """Register a user and return the auth headers for it.

    The cookie set by the response is dropped so each test picks its
    identity explicitly.
    """
    resp = await client.post(
        "/auth/register",
        json={"name": name, "email": email, "password": password},
    )
    assert resp.status_code == 201, resp.text
    client.cookies.clear()
    token = resp.json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
async def alice(client: AsyncClient) -> dict:
    return await register(client, "alice@example.com", name="Alice")


@pytest.fixture()
async def bob(client: AsyncClient) -> dict:
    return await register(client, "bob@example.com", name="Bob")
