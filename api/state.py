"""
api/state.py -- Publishing the live AdminConfig onto app.state.

The only writer of app.state.admin_config. A publish assigns one new frozen
AdminConfig (plus the matching OAuth registry) -- no field of the live config
is ever mutated, so concurrent requests see either the old or the new config,
never a mix.

Startup and reload differ on failure:
  startup -- invalid config either aborts (security_strict) or is published
             with the admin surface disabled.
  reload  -- invalid config is rejected and the previous config stays live.
"""

from __future__ import annotations

import dataclasses
import logging

from fastapi import FastAPI

from auth.oauth import build_oauth
from core.models import AdminConfig, ConfigValidation
from core.resolver import bypass_posture_warnings, validate_admin_config

logger = logging.getLogger("proforwarder.admin.config")


def log_config(config: AdminConfig) -> list[str]:
    """Log the startup posture of the admin surface; return the warnings."""
    if not config.enabled:
        logger.info("Web admin disabled")
        return []

    logger.info("Web admin auth mode is %s", config.auth_mode.value)
    if config.debug:
        logger.info(
            "trust_proxy=%s; base_url=%s; auth_mode=%s; allowed_hosts=%s; allowed_ips=%s",
            config.trust_proxy,
            config.base_url or "(not set)",
            config.auth_mode.value,
            ",".join(sorted(config.local_allowed_hosts)) or "(none)",
            ",".join(sorted(config.local_allowed_ips)) or "(none)",
        )
    warnings = bypass_posture_warnings(config)
    for warning in warnings:
        logger.warning("Local bypass: %s", warning)
    return warnings


def publish(app: FastAPI, config: AdminConfig) -> None:
    app.state.oauth = build_oauth(config)
    app.state.admin_config = config


def publish_startup_config(app: FastAPI, config: AdminConfig) -> ConfigValidation:
    """Validate and publish the config resolved at startup.

    Raises:
        RuntimeError: security_strict is on and required settings are missing.
    """
    validation = validate_admin_config(config)
    if config.enabled and not validation.valid:
        missing = ", ".join(validation.missing)
        if config.security_strict:
            raise RuntimeError(f"Web admin refused to start due to missing config: {missing}")
        logger.error("Web admin disabled due to missing config: %s", missing)
        config = dataclasses.replace(config, enabled=False)

    log_config(config)
    publish(app, config)
    return validation


def publish_reloaded_config(app: FastAPI, config: AdminConfig) -> tuple[bool, ConfigValidation]:
    """Swap in a reloaded config if it validates. Returns (published, validation)."""
    validation = validate_admin_config(config)
    if config.enabled and not validation.valid:
        logger.error("Config reload rejected due to missing config: %s", ", ".join(validation.missing))
        return False, validation

    log_config(config)
    publish(app, config)
    logger.info("Admin config reloaded")
    return True, validation
