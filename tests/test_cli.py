"""Tests for main.py -- the operator CLI.

Covers:
- `check` exit codes for valid and invalid OAuth configuration
- `check --json` payload shape and secret masking
- `serve` refusing to start a disabled surface
- No subcommand prints help
"""

from __future__ import annotations

import json
from unittest.mock import patch

import main


def test_check_valid_local_config(clean_env, capsys):
    clean_env.setenv("WEB_ADMIN_ENABLED", "true")
    assert main.main(["check"]) == 0
    out = capsys.readouterr().out
    assert "Configuration is valid." in out
    assert "host header only" in out


def test_check_reports_missing_oauth_settings(clean_env, capsys):
    clean_env.setenv("WEB_ADMIN_AUTH_MODE", "oauth")
    clean_env.setenv("WEB_ADMIN_SESSION_SECRET", "s")
    clean_env.setenv("WEB_ADMIN_DISCORD_CLIENT_SECRET", "c")
    clean_env.setenv("WEB_ADMIN_DISCORD_REDIRECT_URI", "https://example.com/cb")
    assert main.main(["check"]) == 1
    out = capsys.readouterr().out
    assert "Missing required settings: WEB_ADMIN_DISCORD_CLIENT_ID" in out


def test_check_json_masks_secrets(clean_env, capsys):
    clean_env.setenv("WEB_ADMIN_AUTH_MODE", "oauth")
    clean_env.setenv("WEB_ADMIN_DISCORD_CLIENT_SECRET", "top-secret")
    assert main.main(["check", "--json"]) == 1
    out = capsys.readouterr().out
    payload = json.loads(out)
    assert payload["config"]["oauth_client_secret"] == "set"
    assert payload["validation"]["valid"] is False
    assert "WEB_ADMIN_DISCORD_CLIENT_SECRET" not in payload["validation"]["missing"]
    assert "top-secret" not in out


def test_serve_refuses_disabled_surface(clean_env, capsys):
    with patch("uvicorn.run") as run:
        assert main.main(["serve"]) == 1
    run.assert_not_called()
    assert "disabled" in capsys.readouterr().out


def test_serve_passes_port_and_proxy_headers(clean_env):
    clean_env.setenv("WEB_ADMIN_ENABLED", "true")
    clean_env.setenv("WEB_ADMIN_PORT", "4200")
    clean_env.setenv("WEB_ADMIN_TRUST_PROXY", "true")
    with patch("uvicorn.run") as run:
        assert main.main(["serve"]) == 0
    kwargs = run.call_args.kwargs
    assert kwargs["port"] == 4200
    assert kwargs["proxy_headers"] is True
    assert kwargs["host"] == "127.0.0.1"


def test_no_command_prints_help(capsys):
    assert main.main([]) == 0
    assert "usage:" in capsys.readouterr().out
