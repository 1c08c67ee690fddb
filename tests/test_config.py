"""Tests for core/config.py -- environment variables to AdminConfig.

Covers:
- Env var names map onto the raw web_admin / command_ui structure
- Malformed env values never abort Settings construction
- get_settings() caching and reload_admin_config() re-reading the environment
- AdminConfig repr keeps secrets out of logs
"""

from __future__ import annotations

from core.config import Settings, get_settings, load_admin_config, reload_admin_config
from core.models import AuthMode


def test_unset_environment_resolves_to_defaults(clean_env):
    config = load_admin_config()
    assert config.enabled is False
    assert config.port == 3001
    assert config.auth_mode is AuthMode.local


def test_env_names_map_to_fields(clean_env):
    clean_env.setenv("WEB_ADMIN_ENABLED", "true")
    clean_env.setenv("WEB_ADMIN_PORT", "4000")
    clean_env.setenv("WEB_ADMIN_AUTH_MODE", "oauth")
    clean_env.setenv("WEB_ADMIN_DISCORD_CLIENT_ID", "abc")
    clean_env.setenv("WEB_ADMIN_LOCAL_ALLOWED_IPS", "127.0.0.1, ::1")
    clean_env.setenv("WEB_ADMIN_BASE_URL", "https://admin.example.com/")

    config = load_admin_config()
    assert config.enabled is True
    assert config.port == 4000
    assert config.auth_mode is AuthMode.oauth
    assert config.oauth_client_id == "abc"
    assert config.local_allowed_ips == frozenset({"127.0.0.1", "::1"})
    assert config.base_url == "https://admin.example.com"


def test_to_raw_shape(clean_env):
    clean_env.setenv("WEB_ADMIN_SESSION_SECRET", "shh")
    clean_env.setenv("COMMAND_UI_ALLOWED_ROLE_IDS", "42")
    raw = Settings().to_raw()
    assert raw["web_admin"]["session_secret"] == "shh"
    assert raw["web_admin"]["port"] is None
    assert raw["command_ui"] == {"allowed_role_ids": "42"}


def test_legacy_role_ids_from_env(clean_env):
    clean_env.setenv("COMMAND_UI_ALLOWED_ROLE_IDS", "1,2")
    assert load_admin_config().allowed_role_ids == frozenset({"1", "2"})

    clean_env.setenv("WEB_ADMIN_ALLOWED_ROLE_IDS", "3")
    assert reload_admin_config().allowed_role_ids == frozenset({"3"})


def test_malformed_env_values_do_not_raise(clean_env):
    clean_env.setenv("WEB_ADMIN_PORT", "30o1")
    clean_env.setenv("WEB_ADMIN_ENABLED", "maybe")
    clean_env.setenv("WEB_ADMIN_SESSION_TTL_HOURS", "")
    config = load_admin_config()
    assert config.port == 30
    assert config.enabled is False
    assert config.session_ttl_hours == 24


def test_settings_are_cached_until_reload(clean_env):
    clean_env.setenv("WEB_ADMIN_PORT", "5000")
    assert load_admin_config().port == 5000

    clean_env.setenv("WEB_ADMIN_PORT", "6000")
    assert get_settings() is get_settings()
    assert load_admin_config().port == 5000
    assert reload_admin_config().port == 6000


def test_dotenv_file_is_read(clean_env, tmp_path):
    (tmp_path / ".env").write_text("WEB_ADMIN_ENABLED=true\nWEB_ADMIN_LOCAL_ALLOWED_HOSTS=admin.lan\n")
    config = load_admin_config()
    assert config.enabled is True
    assert config.local_allowed_hosts == frozenset({"admin.lan"})


def test_repr_hides_secrets(clean_env):
    clean_env.setenv("WEB_ADMIN_SESSION_SECRET", "super-secret-value")
    clean_env.setenv("WEB_ADMIN_DISCORD_CLIENT_SECRET", "client-secret-value")
    config = load_admin_config()
    text = repr(config)
    assert "super-secret-value" not in text
    assert "client-secret-value" not in text
    assert config.summary()["session_secret"] == "set"
    assert config.summary()["oauth_client_secret"] == "set"
