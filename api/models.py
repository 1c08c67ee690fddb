"""
API request and response models for the admin REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in core/models.py and
auth/models.py, which own the internal domain representation. Route handlers
map between the two.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import AdminPrincipal
from core.models import ConfigValidation

# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str


class AdminHealthResponse(BaseModel):
    """Response for GET /admin/health -- no details beyond the login state."""

    ok: bool = True
    logged_in: bool


# ---------------------------------------------------------------------------
# Admin
# ---------------------------------------------------------------------------


class MeResponse(BaseModel):
    id: str
    username: str
    global_name: str = ""
    avatar: str = ""
    guild_ids: list[str] = Field(default_factory=list)
    local_bypass: bool = False

    @classmethod
    def from_principal(cls, principal: AdminPrincipal) -> "MeResponse":
        return cls(
            id=principal.id,
            username=principal.username,
            global_name=principal.global_name,
            avatar=principal.avatar,
            guild_ids=principal.guild_ids,
            local_bypass=principal.local_bypass,
        )


class ValidationResult(BaseModel):
    valid: bool
    missing: list[str] = Field(default_factory=list)

    @classmethod
    def from_domain(cls, validation: ConfigValidation) -> "ValidationResult":
        return cls(valid=validation.valid, missing=list(validation.missing))


class ConfigSummaryResponse(BaseModel):
    """Masked view of the live config. Secrets appear only as set / not set."""

    config: dict[str, Any]
    warnings: list[str] = Field(default_factory=list)
    validation: ValidationResult


class ReloadResponse(BaseModel):
    """Result of POST /api/v1/admin/reload.

    published is False when the re-read config failed validation; the previous
    config stays live in that case.
    """

    published: bool
    validation: ValidationResult
    warnings: list[str] = Field(default_factory=list)
