"""Command line entry point for serving the tracker and preparing storage."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

from phase10tracker.backend import migrate
from phase10tracker.backend.config import load_settings
from phase10tracker.backend.logging_config import setup_logging


logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    settings = load_settings()
    parser = argparse.ArgumentParser(description="Phase 10 score tracker")
    parser.add_argument("--log-level", default=settings.log_level)
    parser.add_argument("--log-dir", type=Path, default=None)
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=settings.host)
    serve.add_argument("--port", type=int, default=settings.port)

    migrate_parser = subparsers.add_parser("migrate", help="Create the PostgreSQL snapshot table")
    migrate_parser.add_argument("--database-url", default=None)
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(level=args.log_level.upper(), log_dir=args.log_dir)

    if args.command == "migrate":
        migrate.main(args.database_url)
        return 0

    import uvicorn

    from phase10tracker.backend.api import create_app

    logger.info("Serving Phase 10 tracker on %s:%d", args.host, args.port)
    uvicorn.run(create_app(), host=args.host, port=args.port, log_config=None)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
