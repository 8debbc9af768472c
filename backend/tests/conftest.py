"""
Pytest configuration for Orgboard backend tests.

The app runs in-process against an in-memory SQLite database and an
in-memory stand-in for the Redis token store.
"""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-long-enough-for-hs256")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import time
import uuid
from typing import AsyncGenerator

import httpx
import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from orgboard.core.database import get_db
from orgboard.core.dependencies import get_redis
from orgboard.main import app
from orgboard.models import Base


class InMemoryRedis:
    """The subset of redis.asyncio.Redis used by the auth flow."""

    def __init__(self) -> None:
        self._data: dict[str, tuple[str, float | None]] = {}

    def _live(self, key: str) -> bool:
        item = self._data.get(key)
        if item is None:
            return False
        _, expires_at = item
        if expires_at is not None and expires_at <= time.monotonic():
            del self._data[key]
            return False
        return True

    async def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if self._live(key))

    async def setex(self, key: str, seconds: int, value: str) -> bool:
        self._data[key] = (value, time.monotonic() + seconds)
        return True

    async def set(self, key: str, value: str) -> bool:
        self._data[key] = (value, None)
        return True

    async def get(self, key: str) -> str | None:
        return self._data[key][0] if self._live(key) else None

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._live(key):
                del self._data[key]
                removed += 1
        return removed

    async def aclose(self) -> None:
        self._data.clear()


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
async def client(session_factory, fake_redis) -> AsyncGenerator[httpx.AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def override_get_redis() -> InMemoryRedis:
        return fake_redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

PASSWORD = "password123"


def unique_email(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}@example.com"


def auth(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def register(client: httpx.AsyncClient, email: str, password: str = PASSWORD) -> dict:
    resp = await client.post("/api/v1/auth/register", json={"email": email, "password": password})
    assert resp.status_code == 201, f"Register failed: {resp.text}"
    return resp.json()


async def login(client: httpx.AsyncClient, email: str, password: str = PASSWORD) -> dict:
    resp = await client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, f"Login failed: {resp.text}"
    return resp.json()


async def signup(client: httpx.AsyncClient, prefix: str) -> tuple[dict, str]:
    """Register and log in a fresh user. Returns (user, access_token)."""
    email = unique_email(prefix)
    user = await register(client, email)
    tokens = await login(client, email)
    return user, tokens["access_token"]


async def create_org(client: httpx.AsyncClient, token: str, name: str = "Acme") -> dict:
    resp = await client.post("/api/v1/organizations", json={"name": name}, headers=auth(token))
    assert resp.status_code == 201, f"Create org failed: {resp.text}"
    return resp.json()


async def join_org(client: httpx.AsyncClient, token: str, org_id: str) -> httpx.Response:
    return await client.post(f"/api/v1/organizations/{org_id}/join", headers=auth(token))


async def create_project(client: httpx.AsyncClient, token: str, org_id: str, name: str = "Launch") -> dict:
    resp = await client.post(
        f"/api/v1/organizations/{org_id}/projects",
        json={"name": name},
        headers=auth(token),
    )
    assert resp.status_code == 201, f"Create project failed: {resp.text}"
    return resp.json()


async def create_task(
    client: httpx.AsyncClient,
    token: str,
    project_id: str,
    title: str = "Write spec",
    assignee_id: str | None = None,
) -> httpx.Response:
    return await client.post(
        f"/api/v1/projects/{project_id}/tasks",
        json={"title": title, "assignee_id": assignee_id},
        headers=auth(token),
    )
