"""Tests for api/state.py -- validating and publishing the live AdminConfig.

Covers:
- Startup with missing OAuth settings: disabled copy, or refusal under security_strict
- Reload rejection keeps the previous config live
- Publishing replaces the reference; the old instance is untouched
"""

from __future__ import annotations

import logging
from types import SimpleNamespace

import pytest

from api.state import publish_reloaded_config, publish_startup_config
from core.models import AdminConfig, AuthMode


def _app() -> SimpleNamespace:
    return SimpleNamespace(state=SimpleNamespace())


def _complete_oauth(**overrides) -> AdminConfig:
    values = {
        "enabled": True,
        "auth_mode": AuthMode.oauth,
        "session_secret": "s",
        "oauth_client_id": "i",
        "oauth_client_secret": "c",
        "oauth_redirect_uri": "https://example.com/cb",
    }
    values.update(overrides)
    return AdminConfig(**values)


class TestStartup:
    def test_valid_config_is_published_as_is(self):
        app = _app()
        config = _complete_oauth()
        validation = publish_startup_config(app, config)
        assert validation.valid is True
        assert app.state.admin_config is config
        assert app.state.oauth is not None

    def test_missing_oauth_settings_disable_the_surface(self, caplog):
        app = _app()
        config = _complete_oauth(oauth_client_id="")
        with caplog.at_level(logging.ERROR, logger="proforwarder.admin.config"):
            validation = publish_startup_config(app, config)
        assert validation.missing == ["WEB_ADMIN_DISCORD_CLIENT_ID"]
        assert app.state.admin_config.enabled is False
        assert config.enabled is True
        assert "WEB_ADMIN_DISCORD_CLIENT_ID" in caplog.text

    def test_security_strict_refuses_to_start(self):
        app = _app()
        with pytest.raises(RuntimeError, match="WEB_ADMIN_SESSION_SECRET"):
            publish_startup_config(app, _complete_oauth(session_secret="", security_strict=True))
        assert not hasattr(app.state, "admin_config")

    def test_disabled_surface_skips_validation_failure(self):
        app = _app()
        publish_startup_config(app, AdminConfig(enabled=False, auth_mode=AuthMode.oauth))
        assert app.state.admin_config.enabled is False

    def test_permissive_bypass_logs_warning(self, caplog):
        app = _app()
        config = AdminConfig(enabled=True, local_allowed_hosts=frozenset(), local_allowed_ips=frozenset())
        with caplog.at_level(logging.WARNING, logger="proforwarder.admin.config"):
            publish_startup_config(app, config)
        assert "every request" in caplog.text


class TestReload:
    def test_valid_reload_swaps_reference(self):
        app = _app()
        old = AdminConfig(enabled=True)
        publish_startup_config(app, old)
        new = AdminConfig(enabled=True, port=4000)

        published, validation = publish_reloaded_config(app, new)
        assert published is True
        assert validation.valid is True
        assert app.state.admin_config is new
        assert old.port == 3001

    def test_invalid_reload_keeps_previous_config(self):
        app = _app()
        old = AdminConfig(enabled=True)
        publish_startup_config(app, old)

        published, validation = publish_reloaded_config(app, _complete_oauth(oauth_redirect_uri=""))
        assert published is False
        assert validation.missing == ["WEB_ADMIN_DISCORD_REDIRECT_URI"]
        assert app.state.admin_config is old
