"""Test fixtures — a fresh app and store per test.

Learn: Testing pattern for FastAPI + async storage:

1. create_app() takes an explicit Settings, so every test builds its own
   app with its own store and secret — no shared state between tests.
2. API fixtures are parametrized over both storage backends: the
   in-memory store and the SQL store on an in-memory SQLite database
   (aiosqlite). The same assertions must hold for both.
3. httpx's ASGITransport drives the app in-process; no server, no sockets.
"""

import uuid
from typing import Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from tasklist.config import Settings
from tasklist.main import create_app

TEST_SECRET = "test-secret-for-hs256-signing-0123456789"
SQLITE_URL = "sqlite+aiosqlite:///:memory:"


def make_settings(backend: str = "memory", **overrides) -> Settings:
    values = {
        "storage_backend": backend,
        "database_url": SQLITE_URL,
        "jwt_secret": TEST_SECRET,
        "environment": "test",
    }
    values.update(overrides)
    return Settings(**values)


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


@pytest_asyncio.fixture(params=["memory", "sql"])
async def app(request):
    """App wired to one storage backend, schema created."""
    application = create_app(make_settings(request.param))
    await application.state.storage.init_schema()
    yield application
    await application.state.storage.close()


@pytest_asyncio.fixture()
async def client(app):
    """HTTP client running the real auth pipeline (no overrides)."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def register(client):
    """Register a fresh account through the API, return {token, user}."""

    async def _register(email: Optional[str] = None, password: str = "secret1") -> dict:
        r = await client.post(
            "/api/auth/register",
            json={"email": email or unique_email(), "password": password},
        )
        assert r.status_code == 201, r.text
        return r.json()

    return _register
