"""
auth/dependencies.py -- FastAPI Depends() helpers for admin authentication.

Two auth sources are checked in priority order:
  1. Local bypass gate -- request proves it is local (auth.bypass). Only
     consulted in local auth mode; OAuth deployments always need a session.
  2. Session principal ("admin_auth") -- set by the local login routes or by
     the OAuth callback collaborator.

The live AdminConfig is read from app.state.admin_config on every request.
It is an immutable value; a reload replaces the reference wholesale, so each
request sees one complete config from start to finish.

try_get_admin() is the soft variant (returns None on failure).
get_current_admin() wraps it and raises HTTP 401 if unauthenticated.
require_admin_surface() raises HTTP 404 while the admin surface is disabled.

Layer rule: no imports from api/.
"""

from __future__ import annotations

import logging

from fastapi import HTTPException, Request

from auth.bypass import evaluate_local_bypass
from auth.models import SESSION_KEY, AdminPrincipal, local_bypass_principal
from core.models import AdminConfig, AuthMode, BypassDecision, BypassRequest

logger = logging.getLogger("proforwarder.admin.auth")


def get_admin_config(request: Request) -> AdminConfig:
    return request.app.state.admin_config


def require_admin_surface(request: Request) -> AdminConfig:
    """Return the live config, or 404 when the admin surface is switched off."""
    config = get_admin_config(request)
    if not config.enabled:
        raise HTTPException(
            status_code=404,
            detail={"code": "admin_disabled", "message": "Admin console is not enabled."},
        )
    return config


def bypass_request_from(request: Request) -> BypassRequest:
    """Snapshot the Host header and the transport peer address.

    request.client is the ASGI connection peer. uvicorn only rewrites it from
    X-Forwarded-For when started with proxy_headers, which main.py does only
    when trust_proxy is set -- and the gate is off in that mode.
    """
    return BypassRequest(
        host_header=request.headers.get("host", ""),
        remote_address=request.client.host if request.client else "",
    )


def check_local_bypass(request: Request, config: AdminConfig) -> BypassDecision:
    """Evaluate the gate for this request and write the audit log line."""
    decision = evaluate_local_bypass(bypass_request_from(request), config)
    logger.log(
        logging.INFO if config.debug else logging.DEBUG,
        "Local bypass %s: %s; host=%s; remote_ip=%s",
        "allowed" if decision.allowed else "denied",
        decision.reason,
        decision.host or "(empty)",
        decision.remote_ip or "(empty)",
    )
    return decision


def try_get_admin(request: Request) -> AdminPrincipal | None:
    """Resolve the admin principal for this request, or None.

    Never raises for auth failures -- callers that need a hard 401 should use
    get_current_admin(). The bypass gate runs before the session is read, so
    a local request needs no cookie at all. In OAuth mode only the session counts.
    """
    config = require_admin_surface(request)

    if config.auth_mode == AuthMode.local and check_local_bypass(request, config).allowed:
        return local_bypass_principal()

    return AdminPrincipal.from_session(request.session.get(SESSION_KEY))


def get_current_admin(request: Request) -> AdminPrincipal:
    """Require an admin principal. Raises HTTP 401 if there is none.

    Use as a FastAPI dependency:
        @router.get("/protected")
        async def route(admin: AdminPrincipal = Depends(get_current_admin)): ...
    """
    admin = try_get_admin(request)
    if admin is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "unauthorized", "message": "Authentication required."},
        )
    return admin
