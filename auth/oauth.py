"""
auth/oauth.py -- Authlib registry for the Discord OAuth login redirect.

build_oauth() is called with the resolved AdminConfig at startup and again on
every reload, so the registry always matches the published config. Discord is
registered only when both client ID and secret are set.

The OAuth state parameter (CSRF protection) is stored by authlib in the
Starlette session between the authorization redirect and the callback. The
callback itself -- code exchange, user and guild lookup -- belongs to the
session collaborator, which writes the resulting AdminPrincipal into the
session under auth.models.SESSION_KEY.

Layer rule: no imports from api/. Import from core/ is allowed.
"""

from __future__ import annotations

import logging

from authlib.integrations.starlette_client import OAuth

from core.models import AdminConfig, AuthMode

logger = logging.getLogger("proforwarder.admin.auth.oauth")

DISCORD_AUTHORIZE_URL = "https://discord.com/api/oauth2/authorize"
DISCORD_TOKEN_URL = "https://discord.com/api/oauth2/token"  # noqa: S105 -- URL, not a password
DISCORD_API_BASE_URL = "https://discord.com/api/"


def oauth_client_configured(config: AdminConfig) -> bool:
    """True when the login redirect can be built (ID, secret and redirect URI)."""
    return bool(config.oauth_client_id and config.oauth_client_secret and config.oauth_redirect_uri)


def build_oauth(config: AdminConfig) -> OAuth:
    """Return a fresh authlib registry for this config."""
    oauth = OAuth()
    if config.oauth_client_id and config.oauth_client_secret:
        oauth.register(
            name="discord",
            client_id=config.oauth_client_id,
            client_secret=config.oauth_client_secret,
            authorize_url=DISCORD_AUTHORIZE_URL,
            access_token_url=DISCORD_TOKEN_URL,
            api_base_url=DISCORD_API_BASE_URL,
            client_kwargs={"scope": config.oauth_scopes},
        )
        logger.info("Discord OAuth provider registered")
    elif config.auth_mode is AuthMode.oauth:
        logger.warning("OAuth auth mode selected but Discord client credentials are not set")
    return oauth
