#!/usr/bin/env python3
"""
Command line entry point for the storefront session layer
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import json
import logging
import sys

from pydantic import ValidationError

from .application_context import SessionContext
from .config import SessionConfig
from .errors.handling import log_error
from .errors.internal import SessionExpired, SessionLayerError
from .logging_config import LoggerConfigurator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storefront-session",
        description="Authenticated storefront session client",
    )
    parser.add_argument("--base-url", help="Backend API root URL")
    parser.add_argument(
        "--credentials-file",
        help="JSON file used to persist credentials between runs",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    for name in ("login", "register"):
        p = sub.add_parser(name, help=f"{name.capitalize()} with a username and password")
        p.add_argument("user_name")
        p.add_argument("--password", help="Password (prompted when omitted)")

    sub.add_parser("profile", help="Show the signed-in user's profile")
    sub.add_parser("refresh", help="Renew the access credential now")
    sub.add_parser("status", help="Show whether a session is active")
    sub.add_parser("logout", help="Forget stored credentials")
    return parser


def _config_from_args(args: argparse.Namespace) -> SessionConfig:
    overrides: dict[str, str] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.credentials_file:
        overrides["credentials_file"] = args.credentials_file
    return SessionConfig(**overrides)


async def execute(args: argparse.Namespace, ctx: SessionContext) -> int:
    """Run one CLI command against a wired session context.

    Returns:
        Process exit code.
    """
    account = ctx.account
    if args.command in ("login", "register"):
        password = args.password or getpass.getpass("Password: ")
        if args.command == "login":
            result = await account.login(args.user_name, password)
            if not result.access_token:
                print("Login returned no access token")
                return 1
            print(f"Logged in as {args.user_name}")
        else:
            await account.register(args.user_name, password)
            print(f"Registered {args.user_name}")
        return 0
    if args.command == "profile":
        profile = await account.fetch_profile()
        if profile is None:
            print("Not logged in")
            return 1
        print(json.dumps(profile.model_dump(by_alias=True), indent=2, default=str))
        return 0
    if args.command == "refresh":
        token = await account.refresh_token_if_needed()
        print("Access credential renewed" if token else "No refresh credential stored")
        return 0 if token else 1
    if args.command == "status":
        print("active" if ctx.view.is_active else "inactive")
        return 0 if ctx.view.is_active else 1
    if args.command == "logout":
        account.logout()
        print("Logged out")
        return 0
    raise ValueError(f"Unknown command: {args.command}")


async def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        config = _config_from_args(args)
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2
    ctx = await SessionContext.create(config)
    try:
        return await execute(args, ctx)
    except SessionExpired:
        print("Session expired, please log in again", file=sys.stderr)
        return 1
    except SessionLayerError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValidationError as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2
    finally:
        await ctx.shutdown()


def run() -> None:
    """Synchronous entry point for the ``storefront-session`` command."""
    LoggerConfigurator().configure()
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        sys.exit(130)
    except Exception as e:
        log_error("Top-level error", e)
        logging.debug("Top-level error details", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
