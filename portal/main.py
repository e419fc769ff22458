"""
Admin portal - command line entry point.

Usage:
    python -m portal.main serve [--host HOST] [--port PORT] [--reload]
    python -m portal.main sweep-invitations
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from portal.config import configure_logging, get_settings
from portal.core.errors import PortalError

logger = logging.getLogger(__name__)


def serve(host: str, port: int, reload: bool) -> None:
    import uvicorn

    uvicorn.run("portal.main:create_default_app", host=host, port=port, reload=reload, factory=True)


def create_default_app():
    from portal.api.app import create_app

    return create_app()


async def sweep_invitations() -> int:
    """Delete every expired invitation. Returns how many were removed."""
    from portal.auth.providers import create_auth_provider
    from portal.services import InvitationService
    from portal.storage import create_data_store

    settings = get_settings()
    store = create_data_store(settings)
    auth_provider = create_auth_provider(settings)
    try:
        return await InvitationService(store, auth_provider, settings).sweep_expired()
    finally:
        await store.close()
        await auth_provider.close()


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()

    parser = argparse.ArgumentParser(prog="portal", description="Multi-tenant admin portal")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default=settings.api_host)
    serve_parser.add_argument("--port", type=int, default=settings.api_port)
    serve_parser.add_argument("--reload", action="store_true", help="Auto-reload on code changes")

    subparsers.add_parser("sweep-invitations", help="Delete expired invitations")

    args = parser.parse_args(argv)
    configure_logging(settings.log_level)

    if args.command == "serve":
        serve(args.host, args.port, args.reload)
        return 0

    try:
        deleted = asyncio.run(sweep_invitations())
    except PortalError as e:
        logger.error(f"Sweep failed: {e.message}")
        return 1
    print(f"Deleted {deleted} expired invitations")
    return 0


if __name__ == "__main__":
    sys.exit(main())
