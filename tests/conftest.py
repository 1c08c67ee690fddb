"""
Shared pytest fixtures for the ProForwarder admin test suite.

Integration fixtures run the real ASGI app (asgi.app, API + web routes) with
the lifespan patched to publish a test AdminConfig instead of one read from
the environment. The OAuth registry is mocked so no network calls happen.

TestClient facts the fixtures rely on:
  Host header      -> "testserver"
  request.client   -> ("testclient", 50000)
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.responses import RedirectResponse
from fastapi.testclient import TestClient

from api.limiter import limiter
from asgi import app
from core.config import get_settings
from core.models import AdminConfig, AuthMode

DISCORD_REDIRECT = "https://discord.com/api/oauth2/authorize?client_id=client-id&state=test-state"

# ---------------------------------------------------------------------------
# Config builders
# ---------------------------------------------------------------------------


def make_config(**overrides) -> AdminConfig:
    """Enabled local-mode config whose allowlists match the TestClient peer."""
    values = {
        "enabled": True,
        "auth_mode": AuthMode.local,
        "local_allowed_hosts": frozenset({"testserver"}),
        "local_allowed_ips": frozenset({"testclient"}),
    }
    values.update(overrides)
    return AdminConfig(**values)


def make_oauth_config(**overrides) -> AdminConfig:
    """Fully configured OAuth-mode config; local bypass denied for TestClient."""
    values = {
        "auth_mode": AuthMode.oauth,
        "session_secret": "s" * 32,
        "oauth_client_id": "client-id",
        "oauth_client_secret": "client-secret",
        "oauth_redirect_uri": "http://localhost:3001/admin/callback",
        "local_allowed_hosts": frozenset({"localhost"}),
        "local_allowed_ips": frozenset({"127.0.0.1"}),
    }
    values.update(overrides)
    return make_config(**values)


# ---------------------------------------------------------------------------
# Lifespan patching
# ---------------------------------------------------------------------------


def _patch_lifespan(config: AdminConfig):
    """Return an async context manager that replaces the real lifespan.

    Publishes the given config directly to app.state and installs a mocked
    OAuth registry whose authorize_redirect returns a fixed Discord URL.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        oauth = MagicMock()
        oauth.discord.authorize_redirect = AsyncMock(
            return_value=RedirectResponse(DISCORD_REDIRECT, status_code=302)
        )
        app.state.oauth = oauth
        app.state.admin_config = config
        yield

    return test_lifespan


@pytest.fixture
def make_client() -> Generator:
    """Factory fixture: make_client(config) -> TestClient with that config live.

    follow_redirects=False so tests can assert on redirect locations.
    """
    clients: list[TestClient] = []

    def _make(config: AdminConfig) -> TestClient:
        limiter.reset()
        app.router.lifespan_context = _patch_lifespan(config)
        client = TestClient(app, follow_redirects=False, raise_server_exceptions=True)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def local_client(make_client) -> TestClient:
    """Local mode; the TestClient host and peer are both allowlisted."""
    return make_client(make_config())


@pytest.fixture
def remote_client(make_client) -> TestClient:
    """Local mode; only Host 'localhost' is allowlisted, so 'testserver' is denied."""
    return make_client(make_config(local_allowed_hosts=frozenset({"localhost"}), local_allowed_ips=frozenset()))


@pytest.fixture
def oauth_client(make_client) -> TestClient:
    return make_client(make_oauth_config())


@pytest.fixture
def disabled_client(make_client) -> TestClient:
    return make_client(make_config(enabled=False))


@pytest.fixture(autouse=True)
def _fresh_settings() -> Generator[None, None, None]:
    """Drop the cached Settings around each test so env changes take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clean_env(monkeypatch, tmp_path) -> pytest.MonkeyPatch:
    """Remove every admin-related variable from the process environment.

    Also moves into an empty directory so a developer's local .env file
    cannot leak into assertions.
    """
    for name in list(os.environ):
        if name.startswith(("WEB_ADMIN_", "COMMAND_UI_")):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return monkeypatch
