"""
web/routes.py -- Jinja2 template routes for the admin console entry points.

These routes serve the browser-facing login flow. The console itself (tabs,
dashboard cards, settings) is a static front end served by the host process;
admin.html only bootstraps it for an authenticated principal.

Routes:
  GET /admin            -- console shell, or the login page when unauthenticated
  GET /admin/login      -- local mode: bypass login; oauth mode: Discord redirect
  GET /admin/dev-login  -- explicit local bypass login (local mode only)
  GET /admin/logout     -- clear session, redirect /admin
  GET /admin/health     -- liveness + whether this request is logged in

Security:
  The login page never shows why a local bypass was denied. The decision
  reason stays in the server log.
  /admin/login and /admin/dev-login are rate-limited by the auth limits.

Layer rule: web/ may import auth/, core/, api.models and the shared api.limiter
instance. It never imports api.main.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from api.limiter import auth_rate_limit, limiter
from api.models import AdminHealthResponse
from auth.dependencies import check_local_bypass, require_admin_surface, try_get_admin
from auth.models import SESSION_KEY, local_bypass_principal
from auth.oauth import oauth_client_configured
from core.models import AdminConfig, AuthMode

logger = logging.getLogger("proforwarder.admin.web")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
router = APIRouter()

# Whitelist of login page messages. Only these strings reach the template.
_ERROR_MESSAGES: dict[str, str] = {
    "local_only": "Local mode only allows localhost requests.",
    "local_origin": "Local mode is not allowed for this request origin.",
    "oauth_not_configured": "OAuth is not configured. Set Discord OAuth env values.",
}


def _login_page(
    request: Request,
    config: AdminConfig,
    error: Optional[str] = None,
    status_code: int = 200,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "login.html",
        {
            "auth_mode": config.auth_mode.value,
            "error": _ERROR_MESSAGES.get(error or "", ""),
        },
        status_code=status_code,
    )


def _start_local_session(request: Request) -> RedirectResponse:
    request.session[SESSION_KEY] = local_bypass_principal().to_session()
    logger.info("Local bypass session started for %s", request.client.host if request.client else "unknown")
    return RedirectResponse("/admin", status_code=302)


# ---------------------------------------------------------------------------
# Console shell
# ---------------------------------------------------------------------------


@router.get("/admin", response_class=HTMLResponse, include_in_schema=False)
async def admin_home(request: Request):
    config = require_admin_surface(request)
    admin = try_get_admin(request)
    if admin is None:
        return _login_page(request, config)

    return templates.TemplateResponse(request, "admin.html", {"admin": admin})


@router.get("/admin/health", include_in_schema=False)
async def admin_health(request: Request) -> AdminHealthResponse:
    return AdminHealthResponse(logged_in=try_get_admin(request) is not None)


# ---------------------------------------------------------------------------
# Login / logout
#
# /admin/login must be registered before any /admin/{...} catch-all the host
# adds, or FastAPI captures "login" as a path parameter.
# ---------------------------------------------------------------------------


@limiter.limit(auth_rate_limit)
@router.get("/admin/login", include_in_schema=False)
async def login(request: Request):
    """Start a session.

    Local mode: a request that passes the bypass gate gets a local principal;
    any other request is refused with 403 (there is nothing else to log in with).
    OAuth mode: redirect to Discord. authlib stores the state in the session.
    """
    config = require_admin_surface(request)

    if config.auth_mode is AuthMode.local:
        if check_local_bypass(request, config).allowed:
            return _start_local_session(request)
        return _login_page(request, config, error="local_only", status_code=403)

    if not oauth_client_configured(config):
        return _login_page(request, config, error="oauth_not_configured", status_code=400)

    return await request.app.state.oauth.discord.authorize_redirect(request, config.oauth_redirect_uri)


@limiter.limit(auth_rate_limit)
@router.get("/admin/dev-login", include_in_schema=False)
async def dev_login(request: Request):
    config = require_admin_surface(request)
    if config.auth_mode is not AuthMode.local or not check_local_bypass(request, config).allowed:
        return _login_page(request, config, error="local_origin", status_code=403)
    return _start_local_session(request)


@router.get("/admin/logout", include_in_schema=False)
async def logout(request: Request) -> RedirectResponse:
    request.session.clear()
    return RedirectResponse("/admin", status_code=302)
