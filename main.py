#!/usr/bin/env python3
"""
ProForwarder Admin -- operator CLI for the admin surface configuration.

Usage:
  python main.py check
  python main.py check --json
  python main.py serve
  python main.py serve --host 0.0.0.0 --reload

Environment variables:
  WEB_ADMIN_*                   Admin surface settings (see core/config.py).
  COMMAND_UI_ALLOWED_ROLE_IDS   Legacy role allowlist, used when
                                WEB_ADMIN_ALLOWED_ROLE_IDS is not set.
"""

import argparse
import json
import sys
from typing import Optional

from core.config import load_admin_config
from core.resolver import bypass_posture_warnings, validate_admin_config


def check(as_json: bool = False) -> int:
    """Print the resolved config, posture warnings and validation. Returns the exit code."""
    config = load_admin_config()
    validation = validate_admin_config(config)
    warnings = bypass_posture_warnings(config)

    if as_json:
        print(
            json.dumps(
                {
                    "config": config.summary(),
                    "warnings": warnings,
                    "validation": {"valid": validation.valid, "missing": validation.missing},
                },
                indent=2,
            )
        )
        return 0 if validation.valid else 1

    print("\nProForwarder Admin -- configuration check")
    print("─" * 40)
    for key, value in config.summary().items():
        if isinstance(value, list):
            value = ", ".join(value) or "(none)"
        print(f"  {key:<26} {value}")

    if warnings:
        print()
        for warning in warnings:
            print(f"  [!] {warning}")

    print()
    if validation.valid:
        print("  Configuration is valid.\n")
        return 0
    print(f"  [!] Missing required settings: {', '.join(validation.missing)}\n")
    return 1


def serve(host: str, reload: bool = False) -> int:
    """Run the ASGI app with uvicorn on the configured port."""
    import uvicorn

    config = load_admin_config()
    if not config.enabled:
        print("  [!] Web admin is disabled. Set WEB_ADMIN_ENABLED=true to serve it.")
        return 1

    # Forwarded headers rewrite request.client; only honor them behind a proxy.
    uvicorn.run(
        "asgi:app",
        host=host,
        port=config.port,
        reload=reload,
        proxy_headers=config.trust_proxy,
    )
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="proforwarder-admin",
        description="Inspect and serve the ProForwarder admin surface.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py check
  WEB_ADMIN_AUTH_MODE=oauth python main.py check --json
  WEB_ADMIN_ENABLED=true python main.py serve
        """,
    )
    subparsers = parser.add_subparsers(dest="command")

    check_parser = subparsers.add_parser("check", help="Validate the admin configuration")
    check_parser.add_argument(
        "--json",
        action="store_true",
        help="Output structured JSON instead of the terminal report",
    )

    serve_parser = subparsers.add_parser("serve", help="Run the admin web server")
    serve_parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Interface to bind (default: 127.0.0.1)",
    )
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change (development only)",
    )

    args = parser.parse_args(argv)

    if args.command == "check":
        return check(as_json=args.json)
    if args.command == "serve":
        return serve(args.host, reload=args.reload)

    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
