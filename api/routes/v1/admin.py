"""
api/routes/v1/admin.py -- Admin identity and configuration REST endpoints.

Routes:
  GET  /api/v1/admin/me       -- effective admin principal (requires auth)
  GET  /api/v1/admin/config   -- masked config summary + posture warnings (requires auth)
  POST /api/v1/admin/reload   -- re-read the environment and swap the live config (requires auth)

Security:
  Local bypass decisions are never exposed here. The config summary masks
  every secret down to "set" / "(not set)".
  POST /reload is rate-limited by the mutation limits from config.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.limiter import limiter, mutation_rate_limit
from api.models import ConfigSummaryResponse, MeResponse, ReloadResponse, ValidationResult
from api.state import publish_reloaded_config
from auth.dependencies import get_admin_config, get_current_admin
from auth.models import AdminPrincipal
from core.config import reload_admin_config
from core.resolver import bypass_posture_warnings, validate_admin_config

# Auth policy:
# - every route requires an admin principal (local bypass or session)
# Router-level dependency enforces auth; handlers that need the principal
# declare it again, which FastAPI resolves once per request.
router = APIRouter(dependencies=[Depends(get_current_admin)])


@router.get("/admin/me", response_model=MeResponse)
async def me(admin: AdminPrincipal = Depends(get_current_admin)) -> MeResponse:
    """Return the identity operating the console for this request."""
    return MeResponse.from_principal(admin)


@router.get("/admin/config", response_model=ConfigSummaryResponse)
async def config_summary(request: Request) -> ConfigSummaryResponse:
    config = get_admin_config(request)
    return ConfigSummaryResponse(
        config=config.summary(),
        warnings=bypass_posture_warnings(config),
        validation=ValidationResult.from_domain(validate_admin_config(config)),
    )


@limiter.limit(mutation_rate_limit)
@router.post("/admin/reload", response_model=ReloadResponse)
async def reload_config(request: Request) -> ReloadResponse:
    """Re-read settings and publish a new AdminConfig if it validates.

    The live config is replaced by reference, never edited in place. When the
    new config is invalid the previous one stays published and
    published=False is returned alongside the missing setting names.
    """
    config = reload_admin_config()
    published, validation = publish_reloaded_config(request.app, config)
    return ReloadResponse(
        published=published,
        validation=ValidationResult.from_domain(validation),
        warnings=bypass_posture_warnings(config),
    )
