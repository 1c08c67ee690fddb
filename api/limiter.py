"""
api/limiter.py -- Shared slowapi rate limiter and config-driven limits.

Import this in both api/main.py (to mount as middleware) and
api/routes/v1/admin.py / web/routes.py (to apply per-route limits with
@limiter.limit()).

Using a single shared instance ensures all routes share the same in-memory
counter store. The limit values are callables: slowapi evaluates them per
request, so a config reload changes the limits without re-registering routes.

slowapi calls a limit provider without the request, so the config published
on app.state is bound to a context variable for the duration of each request
(see bind_request_config, installed as middleware by api/main.py). The limits
therefore follow the published AdminConfig, never the raw environment.
"""

from __future__ import annotations

import math
from contextvars import ContextVar, Token
from typing import Optional

from slowapi import Limiter
from slowapi.util import get_remote_address

from core.models import AdminConfig

limiter = Limiter(key_func=get_remote_address, storage_uri="memory://")

# Config of the request being served; None outside a request.
_REQUEST_CONFIG: ContextVar[Optional[AdminConfig]] = ContextVar("admin_request_config", default=None)


def bind_request_config(config: Optional[AdminConfig]) -> Token:
    return _REQUEST_CONFIG.set(config)


def reset_request_config(token: Token) -> None:
    _REQUEST_CONFIG.reset(token)


def request_config() -> AdminConfig:
    """The config bound for the current request, or the defaults when none is."""
    return _REQUEST_CONFIG.get() or AdminConfig()


def rate_limit_string(max_requests: int, window_ms: int) -> str:
    """Translate a (max, window in ms) pair into slowapi limit syntax.

    The window is rounded up to whole seconds; both values are at least 1.
    """
    seconds = max(1, math.ceil(window_ms / 1000))
    return f"{max(1, max_requests)} per {seconds} second"


def auth_rate_limit() -> str:
    config = request_config()
    return rate_limit_string(config.auth_rate_limit_max, config.auth_rate_limit_window_ms)


def mutation_rate_limit() -> str:
    config = request_config()
    return rate_limit_string(config.mutation_rate_limit_max, config.mutation_rate_limit_window_ms)
