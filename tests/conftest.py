"""
Shared fixtures: a throwaway SQLite database per test, migrated through the
real migration runner, plus an HTTP client bound to the ASGI app.
"""

from typing import Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config.settings import Settings
from core.context import AppContext
from database.migrations import run_migrations
from main import create_app


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'taskflow-test.db'}",
        jwt_secret="test-secret",
        jwt_expiry_seconds=3600,
        bcrypt_rounds=4,
    )


@pytest_asyncio.fixture
async def context(settings):
    ctx = AppContext.from_settings(settings)
    await run_migrations(ctx.database.engine)
    yield ctx
    await ctx.close()


@pytest_asyncio.fixture
async def session(context):
    async with context.database.session_factory() as db:
        yield db


@pytest_asyncio.fixture
async def app(settings):
    application = create_app(settings)
    await run_migrations(application.state.context.database.engine)
    yield application
    await application.state.context.close()


@pytest_asyncio.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as http:
        yield http


@pytest.fixture
def login_as(client):
    """Register (if needed) and log in; returns Authorization headers."""

    async def _login(username: str, email: str, password: str = "secret123") -> Dict[str, str]:
        await client.post(
            "/api/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        resp = await client.post("/api/auth/login", json={"email": email, "password": password})
        assert resp.status_code == 200, resp.text
        return {"Authorization": f"Bearer {resp.json()['access_token']}"}

    return _login
