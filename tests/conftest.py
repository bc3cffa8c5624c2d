"""
Shared fixtures for the Journalix test suite.

Backend tests run the FastAPI app in-process over ``httpx.ASGITransport``
against a throwaway SQLite file. Dashboard tests use plain dicts in place
of ``st.session_state``.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import AsyncIterator

import httpx
import pytest

from backend.db import dispose_engine
from backend.db_init import init_db
from backend.main import create_app
from backend.settings import reset_settings


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Pure logic tests (no I/O)")
    config.addinivalue_line("markers", "api: Backend HTTP tests")


# =============================================================================
# Time Utilities
# =============================================================================


def days_ago(n: int, reference: date | None = None) -> date:
    return (reference or date.today()) - timedelta(days=n)


# =============================================================================
# Backend Fixtures
# =============================================================================


@pytest.fixture
def backend_env(tmp_path, monkeypatch):
    db_path = tmp_path / "journalix-test.db"
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")
    monkeypatch.setenv("PASSWORD_HASH_ITERATIONS", "1000")
    monkeypatch.setenv("REQUIRE_EMAIL_CONFIRMATION", "false")
    monkeypatch.delenv("OAUTH_GOOGLE_CLIENT_ID", raising=False)
    monkeypatch.delenv("OAUTH_GOOGLE_CLIENT_SECRET", raising=False)
    monkeypatch.delenv("OAUTH_REDIRECT_URI", raising=False)
    reset_settings()
    yield monkeypatch
    reset_settings()


@pytest.fixture
async def client(backend_env) -> AsyncIterator[httpx.AsyncClient]:
    """HTTP client bound to a fresh app and database."""
    await dispose_engine()
    await init_db()
    transport = httpx.ASGITransport(app=create_app())
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    await dispose_engine()


async def _sign_up(client: httpx.AsyncClient, email: str = "ada@example.com", name: str = "Ada") -> dict:
    response = await client.post(
        "/v1/auth/signup",
        json={"name": name, "email": email, "password": "correct-horse"},
    )
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
async def session(client) -> dict:
    return await _sign_up(client)


@pytest.fixture
def auth_headers(session) -> dict:
    return {"X-Session-Token": session["access_token"]}


@pytest.fixture
async def other_headers(client) -> dict:
    payload = await _sign_up(client, email="grace@example.com", name="Grace")
    return {"Authorization": f"Bearer {payload['access_token']}"}


@pytest.fixture
def register(client):
    """Sign up additional accounts: ``await register(email=..., name=...)``."""

    async def _register(email: str = "ada@example.com", name: str = "Ada") -> dict:
        return await _sign_up(client, email=email, name=name)

    return _register
