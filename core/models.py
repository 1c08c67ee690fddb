"""
core/models.py -- Domain dataclasses for the admin access gate.

Pattern: Data class (pure data container). AdminConfig is frozen: a reload
publishes a new instance instead of mutating the live one, so request
handlers can read it concurrently without locks.

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

# ---------------------------------------------------------------------------
# Domain constants
# ---------------------------------------------------------------------------

DEFAULT_PORT = 3001
DEFAULT_SESSION_TTL_HOURS = 24
DEFAULT_OAUTH_SCOPES = "identify guilds"
DEFAULT_AUTH_RATE_LIMIT_WINDOW_MS = 15 * 60 * 1000
DEFAULT_AUTH_RATE_LIMIT_MAX = 20
DEFAULT_MUTATION_RATE_LIMIT_WINDOW_MS = 60 * 1000
DEFAULT_MUTATION_RATE_LIMIT_MAX = 60
DEFAULT_LOCAL_ALLOWED_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


class AuthMode(str, Enum):
    local = "local"
    oauth = "oauth"


@dataclass(frozen=True)
class AdminConfig:
    """Validated, normalized admin surface configuration.

    Built by core.resolver.resolve_admin_config(). Secrets are kept out of
    repr() so the object can be logged without leaking credentials.
    """

    enabled: bool = False
    base_url: str = ""
    port: int = DEFAULT_PORT
    session_ttl_hours: int = DEFAULT_SESSION_TTL_HOURS
    trust_proxy: bool = False
    debug: bool = False
    auth_mode: AuthMode = AuthMode.local
    session_secret: str = field(default="", repr=False)
    oauth_client_id: str = field(default="", repr=False)
    oauth_client_secret: str = field(default="", repr=False)
    oauth_redirect_uri: str = ""
    oauth_scopes: str = DEFAULT_OAUTH_SCOPES
    bot_invite_redirect_uri: str = ""
    security_strict: bool = False
    auth_rate_limit_window_ms: int = DEFAULT_AUTH_RATE_LIMIT_WINDOW_MS
    auth_rate_limit_max: int = DEFAULT_AUTH_RATE_LIMIT_MAX
    mutation_rate_limit_window_ms: int = DEFAULT_MUTATION_RATE_LIMIT_WINDOW_MS
    mutation_rate_limit_max: int = DEFAULT_MUTATION_RATE_LIMIT_MAX
    local_allowed_hosts: frozenset[str] = DEFAULT_LOCAL_ALLOWED_HOSTS
    local_allowed_ips: frozenset[str] = frozenset()
    allowed_role_ids: frozenset[str] = frozenset()

    def to_raw(self) -> dict:
        """Render back into the raw nested shape accepted by the resolver.

        resolve_admin_config(config.to_raw()) == config for every resolved config.
        Set fields become sorted lists so the output is deterministic.
        """
        return {
            "web_admin": {
                "enabled": self.enabled,
                "base_url": self.base_url,
                "port": self.port,
                "session_ttl_hours": self.session_ttl_hours,
                "trust_proxy": self.trust_proxy,
                "debug": self.debug,
                "auth_mode": self.auth_mode.value,
                "session_secret": self.session_secret,
                "oauth_client_id": self.oauth_client_id,
                "oauth_client_secret": self.oauth_client_secret,
                "oauth_redirect_uri": self.oauth_redirect_uri,
                "oauth_scopes": self.oauth_scopes,
                "bot_invite_redirect_uri": self.bot_invite_redirect_uri,
                "security_strict": self.security_strict,
                "auth_rate_limit_window_ms": self.auth_rate_limit_window_ms,
                "auth_rate_limit_max": self.auth_rate_limit_max,
                "mutation_rate_limit_window_ms": self.mutation_rate_limit_window_ms,
                "mutation_rate_limit_max": self.mutation_rate_limit_max,
                "local_allowed_hosts": sorted(self.local_allowed_hosts),
                "local_allowed_ips": sorted(self.local_allowed_ips),
                "allowed_role_ids": sorted(self.allowed_role_ids),
            },
        }

    def summary(self) -> dict:
        """Operator-facing view with every secret reduced to set / not set."""

        def _mask(value: str) -> str:
            return "set" if value else "(not set)"

        return {
            "enabled": self.enabled,
            "base_url": self.base_url or "(not set)",
            "port": self.port,
            "session_ttl_hours": self.session_ttl_hours,
            "trust_proxy": self.trust_proxy,
            "debug": self.debug,
            "auth_mode": self.auth_mode.value,
            "session_secret": _mask(self.session_secret),
            "oauth_client_id": _mask(self.oauth_client_id),
            "oauth_client_secret": _mask(self.oauth_client_secret),
            "oauth_redirect_uri": self.oauth_redirect_uri or "(not set)",
            "oauth_scopes": self.oauth_scopes,
            "bot_invite_redirect_uri": self.bot_invite_redirect_uri or "(not set)",
            "security_strict": self.security_strict,
            "auth_rate_limit": f"{self.auth_rate_limit_max} per {self.auth_rate_limit_window_ms}ms",
            "mutation_rate_limit": f"{self.mutation_rate_limit_max} per {self.mutation_rate_limit_window_ms}ms",
            "local_allowed_hosts": sorted(self.local_allowed_hosts),
            "local_allowed_ips": sorted(self.local_allowed_ips),
            "allowed_role_ids": sorted(self.allowed_role_ids),
        }


@dataclass(frozen=True)
class ConfigValidation:
    valid: bool
    missing: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class BypassRequest:
    """Snapshot of the two per-request signals the local bypass gate reads.

    host_header is the raw Host header. remote_address is the transport-level
    peer address of the connection, never a forwarded-for header value.
    """

    host_header: object = ""
    remote_address: object = ""


@dataclass(frozen=True)
class BypassDecision:
    allowed: bool
    reason: str  # audit/debug logging only -- never returned to the caller
    host: str
    remote_ip: str
