"""
core/resolver.py -- Turn loosely-typed deployment config into an AdminConfig.

Resolution never fails. Every helper maps malformed input to its documented
fallback instead of raising, because this runs at startup where crashing on a
typo in an env var is worse than a safe default. Nothing in this module logs:
the host process decides what to report (see api/main.py and main.py).

Raw input shape (origin is irrelevant -- env, file, config service):

    {
        "web_admin": {"enabled": "true", "port": "3001", ...},
        "command_ui": {"allowed_role_ids": "123,456"},
    }

Legacy fallback: web_admin.allowed_role_ids wins; when it is absent or blank,
command_ui.allowed_role_ids is used. This is an explicit two-step lookup.

Layer rule: no imports from api/ or auth/.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from typing import Any

from core.models import (
    DEFAULT_AUTH_RATE_LIMIT_MAX,
    DEFAULT_AUTH_RATE_LIMIT_WINDOW_MS,
    DEFAULT_LOCAL_ALLOWED_HOSTS,
    DEFAULT_MUTATION_RATE_LIMIT_MAX,
    DEFAULT_MUTATION_RATE_LIMIT_WINDOW_MS,
    DEFAULT_OAUTH_SCOPES,
    DEFAULT_PORT,
    DEFAULT_SESSION_TTL_HOURS,
    AdminConfig,
    AuthMode,
    ConfigValidation,
)

# Leading base-10 integer, optional sign. "3001abc" -> 3001, "abc" -> no match.
_INT_RE = re.compile(r"^\s*([+-]?\d+)")

# Operator-facing names for the OAuth requirements, in report order.
OAUTH_REQUIRED_FIELDS = (
    ("WEB_ADMIN_SESSION_SECRET", "session_secret"),
    ("WEB_ADMIN_DISCORD_CLIENT_ID", "oauth_client_id"),
    ("WEB_ADMIN_DISCORD_CLIENT_SECRET", "oauth_client_secret"),
    ("WEB_ADMIN_DISCORD_REDIRECT_URI", "oauth_redirect_uri"),
)


# ---------------------------------------------------------------------------
# Scalar coercion
# ---------------------------------------------------------------------------


def resolve_boolean(raw: Any, fallback: bool = False) -> bool:
    """Return raw as a bool, or fallback when it is not a recognizable boolean.

    Accepts real booleans and the strings "true"/"false" in any case. "yes",
    "1", " true " (surrounding whitespace), None and everything else yield
    fallback.
    """
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        value = raw.lower()
        if value == "true":
            return True
        if value == "false":
            return False
    return fallback


def resolve_integer(raw: Any, fallback: int) -> int:
    """Parse a base-10 integer. Non-numeric input yields fallback.

    Strings are read up to the first non-digit, so "3001/tcp" gives 3001.
    Floats are truncated. Booleans are not numbers here.
    """
    if isinstance(raw, bool):
        return fallback
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else fallback
    if isinstance(raw, str):
        match = _INT_RE.match(raw)
        if match:
            return int(match.group(1))
    return fallback


def resolve_string(raw: Any, fallback: str = "") -> str:
    """Keep a non-empty string; integers (numeric ids from a config file) become strings."""
    if isinstance(raw, str) and raw:
        return raw
    if isinstance(raw, int) and not isinstance(raw, bool):
        return str(raw)
    return fallback


def resolve_string_list(raw: Any, fallback: list[str] | frozenset[str] | None = None) -> list[str]:
    """Accept a sequence or a comma-separated string; trim and drop empties.

    An explicit sequence always wins, even when it trims down to nothing.
    fallback is returned verbatim only when raw is absent, blank, or of an
    unusable type -- so "not configured" and "configured empty" differ only
    when the caller supplies a non-empty fallback.
    """
    if isinstance(raw, (list, tuple, set, frozenset)):
        entries = (str(entry).strip() for entry in raw)
        return [entry for entry in entries if entry]
    if isinstance(raw, str) and raw.strip():
        entries = (entry.strip() for entry in raw.split(","))
        return [entry for entry in entries if entry]
    return list(fallback) if fallback is not None else []


def normalize_base_url(raw: Any) -> str:
    if not isinstance(raw, str) or not raw:
        return ""
    return raw.rstrip("/")


def resolve_auth_mode(raw: Any) -> AuthMode:
    if isinstance(raw, AuthMode):
        return raw
    if isinstance(raw, str) and raw.strip().lower() == AuthMode.oauth.value:
        return AuthMode.oauth
    return AuthMode.local


# ---------------------------------------------------------------------------
# Whole-config resolution
# ---------------------------------------------------------------------------


def _section(raw_config: Any, name: str) -> Mapping:
    if not isinstance(raw_config, Mapping):
        return {}
    section = raw_config.get(name)
    return section if isinstance(section, Mapping) else {}


def resolve_allowed_role_ids(raw_config: Any) -> frozenset[str]:
    """web_admin.allowed_role_ids first, then the legacy command_ui source."""
    legacy = resolve_string_list(_section(raw_config, "command_ui").get("allowed_role_ids"), [])
    return frozenset(resolve_string_list(_section(raw_config, "web_admin").get("allowed_role_ids"), legacy))


def resolve_admin_config(raw_config: Any) -> AdminConfig:
    """Build an AdminConfig from raw, untyped input. Pure; never raises."""
    web_admin = _section(raw_config, "web_admin")

    return AdminConfig(
        enabled=resolve_boolean(web_admin.get("enabled"), False),
        base_url=normalize_base_url(web_admin.get("base_url")),
        port=resolve_integer(web_admin.get("port"), DEFAULT_PORT),
        session_ttl_hours=resolve_integer(web_admin.get("session_ttl_hours"), DEFAULT_SESSION_TTL_HOURS),
        trust_proxy=resolve_boolean(web_admin.get("trust_proxy"), False),
        debug=resolve_boolean(web_admin.get("debug"), False),
        auth_mode=resolve_auth_mode(web_admin.get("auth_mode")),
        session_secret=resolve_string(web_admin.get("session_secret")),
        oauth_client_id=resolve_string(web_admin.get("oauth_client_id")),
        oauth_client_secret=resolve_string(web_admin.get("oauth_client_secret")),
        oauth_redirect_uri=resolve_string(web_admin.get("oauth_redirect_uri")),
        oauth_scopes=resolve_string(web_admin.get("oauth_scopes"), DEFAULT_OAUTH_SCOPES),
        bot_invite_redirect_uri=resolve_string(web_admin.get("bot_invite_redirect_uri")),
        security_strict=resolve_boolean(web_admin.get("security_strict"), False),
        auth_rate_limit_window_ms=resolve_integer(
            web_admin.get("auth_rate_limit_window_ms"), DEFAULT_AUTH_RATE_LIMIT_WINDOW_MS
        ),
        auth_rate_limit_max=resolve_integer(web_admin.get("auth_rate_limit_max"), DEFAULT_AUTH_RATE_LIMIT_MAX),
        mutation_rate_limit_window_ms=resolve_integer(
            web_admin.get("mutation_rate_limit_window_ms"), DEFAULT_MUTATION_RATE_LIMIT_WINDOW_MS
        ),
        mutation_rate_limit_max=resolve_integer(
            web_admin.get("mutation_rate_limit_max"), DEFAULT_MUTATION_RATE_LIMIT_MAX
        ),
        local_allowed_hosts=frozenset(
            resolve_string_list(web_admin.get("local_allowed_hosts"), DEFAULT_LOCAL_ALLOWED_HOSTS)
        ),
        local_allowed_ips=frozenset(resolve_string_list(web_admin.get("local_allowed_ips"), [])),
        allowed_role_ids=resolve_allowed_role_ids(raw_config),
    )


def validate_admin_config(config: AdminConfig) -> ConfigValidation:
    """Report the OAuth fields that are still empty. Local mode is always valid."""
    if config.auth_mode != AuthMode.oauth:
        return ConfigValidation(valid=True, missing=[])

    missing = [name for name, attr in OAUTH_REQUIRED_FIELDS if not getattr(config, attr)]
    return ConfigValidation(valid=not missing, missing=missing)


def bypass_posture_warnings(config: AdminConfig) -> list[str]:
    """Describe bypass configurations an operator should know about.

    An empty allowlist means "no restriction on this dimension", so the
    defaults trust any request whose Host header says localhost. That header
    is client-supplied; only the IP allowlist checks the transport peer.
    """
    if not config.enabled or config.auth_mode != AuthMode.local:
        return []
    if config.trust_proxy:
        return ["trust proxy is enabled: local bypass is off and every request needs full authentication"]
    if not config.local_allowed_hosts and not config.local_allowed_ips:
        return [
            "local bypass has no host or ip allowlist: every request that reaches the server "
            "skips authentication"
        ]
    if not config.local_allowed_ips:
        return [
            "local bypass is restricted by host header only; set WEB_ADMIN_LOCAL_ALLOWED_IPS "
            "to also require a loopback peer address"
        ]
    return []
