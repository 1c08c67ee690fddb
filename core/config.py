"""
core/config.py -- Environment-backed configuration via pydantic-settings.

All environment variable reads for the admin surface happen here. No module
should call os.getenv() or os.environ.get() directly -- import get_settings()
or load_admin_config() instead.

Design patterns used:
  Singleton via lru_cache: get_settings() instantiates Settings once at first
      call and returns the cached instance on every subsequent call. A reload
      clears the cache and builds a fresh instance.

  BaseSettings (pydantic-settings): Reads values from environment variables
      and an optional .env file. Every field is an optional string on purpose:
      Settings only collects raw values, core.resolver does the coercion. A typo
      such as WEB_ADMIN_PORT=30o1 must degrade to a default, not abort startup
      with a pydantic ValidationError.

Layer rule: core/ is the kernel. This module may not import from api/ or auth/.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from core.models import AdminConfig
from core.resolver import resolve_admin_config

# Settings field -> AdminConfig field, for the web_admin section.
_WEB_ADMIN_FIELDS = {
    "web_admin_enabled": "enabled",
    "web_admin_base_url": "base_url",
    "web_admin_port": "port",
    "web_admin_session_ttl_hours": "session_ttl_hours",
    "web_admin_trust_proxy": "trust_proxy",
    "web_admin_debug": "debug",
    "web_admin_auth_mode": "auth_mode",
    "web_admin_session_secret": "session_secret",
    "web_admin_discord_client_id": "oauth_client_id",
    "web_admin_discord_client_secret": "oauth_client_secret",
    "web_admin_discord_redirect_uri": "oauth_redirect_uri",
    "web_admin_oauth_scopes": "oauth_scopes",
    "web_admin_bot_invite_redirect_uri": "bot_invite_redirect_uri",
    "web_admin_security_strict": "security_strict",
    "web_admin_auth_rate_limit_window_ms": "auth_rate_limit_window_ms",
    "web_admin_auth_rate_limit_max": "auth_rate_limit_max",
    "web_admin_mutation_rate_limit_window_ms": "mutation_rate_limit_window_ms",
    "web_admin_mutation_rate_limit_max": "mutation_rate_limit_max",
    "web_admin_local_allowed_hosts": "local_allowed_hosts",
    "web_admin_local_allowed_ips": "local_allowed_ips",
    "web_admin_allowed_role_ids": "allowed_role_ids",
}


class Settings(BaseSettings):
    """Raw admin settings loaded from environment variables and .env file.

    Environment variable name mapping: field names are uppercased automatically.
    E.g. `web_admin_port` reads from WEB_ADMIN_PORT. None means "not set".
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ------------------------------------------------------------------
    # Surface
    # ------------------------------------------------------------------

    web_admin_enabled: Optional[str] = None
    web_admin_base_url: Optional[str] = None
    web_admin_port: Optional[str] = None
    web_admin_session_ttl_hours: Optional[str] = None
    web_admin_trust_proxy: Optional[str] = None
    web_admin_debug: Optional[str] = None
    web_admin_security_strict: Optional[str] = None

    # ------------------------------------------------------------------
    # Auth (Discord OAuth -- required only when WEB_ADMIN_AUTH_MODE=oauth)
    # ------------------------------------------------------------------

    web_admin_auth_mode: Optional[str] = None
    web_admin_session_secret: Optional[str] = None
    web_admin_discord_client_id: Optional[str] = None
    web_admin_discord_client_secret: Optional[str] = None
    web_admin_discord_redirect_uri: Optional[str] = None
    web_admin_oauth_scopes: Optional[str] = None
    web_admin_bot_invite_redirect_uri: Optional[str] = None

    # ------------------------------------------------------------------
    # Rate limiting
    # ------------------------------------------------------------------

    web_admin_auth_rate_limit_window_ms: Optional[str] = None
    web_admin_auth_rate_limit_max: Optional[str] = None
    web_admin_mutation_rate_limit_window_ms: Optional[str] = None
    web_admin_mutation_rate_limit_max: Optional[str] = None

    # ------------------------------------------------------------------
    # Local bypass allowlists and roles (comma-separated)
    # ------------------------------------------------------------------

    web_admin_local_allowed_hosts: Optional[str] = None
    web_admin_local_allowed_ips: Optional[str] = None
    web_admin_allowed_role_ids: Optional[str] = None
    # Legacy source for allowed_role_ids, shared with the slash-command UI.
    command_ui_allowed_role_ids: Optional[str] = None

    def to_raw(self) -> dict:
        """Return the nested raw structure consumed by core.resolver."""
        return {
            "web_admin": {target: getattr(self, source) for source, target in _WEB_ADMIN_FIELDS.items()},
            "command_ui": {"allowed_role_ids": self.command_ui_allowed_role_ids},
        }


@lru_cache
def get_settings() -> Settings:
    """Return the Settings singleton.

    In tests: call get_settings.cache_clear() between test cases if you need
    to inject different environment variables.
    """
    return Settings()


def load_admin_config() -> AdminConfig:
    """Resolve the current Settings into an immutable AdminConfig."""
    return resolve_admin_config(get_settings().to_raw())


def reload_admin_config() -> AdminConfig:
    """Re-read the environment and return a brand new AdminConfig.

    The caller publishes the result by swapping its reference; the previous
    instance is never touched.
    """
    get_settings.cache_clear()
    return load_admin_config()
