"""Serve the catalog API with uvicorn.

``--library-path`` and ``--database-url`` are exported to the environment
before uvicorn imports the application factory, so reload workers see the
same overrides as the parent process.
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import Sequence

import uvicorn

from .. import config_manager as cfg
from .. import logging_manager
from ..library.sync import file_ops

APP_FACTORY = "catalog.webapi.application:create_app"
UVICORN_LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser for the web API runner."""

    parser = argparse.ArgumentParser(
        description="Serve the audiobook catalog API with uvicorn",
    )
    parser.add_argument(
        "--host",
        default=os.environ.get("CATALOG_API_HOST", "0.0.0.0"),
        help="Interface to bind (default: %(default)s)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("CATALOG_API_PORT", "8000")),
        help="TCP port to bind (default: %(default)s)",
    )
    parser.add_argument(
        "--library-path",
        help="Library root to scan; overrides CATALOG_LIBRARY_PATH.",
    )
    parser.add_argument(
        "--database-url",
        help="SQLAlchemy URL of the catalog database; overrides DATABASE_URL.",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change.",
    )
    parser.add_argument(
        "--log-level",
        choices=UVICORN_LOG_LEVELS,
        help="uvicorn log level (default: the configured CATALOG_LOG_LEVEL)",
    )
    return parser


def apply_overrides(args: argparse.Namespace) -> cfg.CatalogSettings:
    """Export command line overrides and return the settings they produce."""

    if args.library_path:
        os.environ["CATALOG_LIBRARY_PATH"] = args.library_path
    if args.database_url:
        os.environ["DATABASE_URL"] = args.database_url
    cfg.reset_settings_cache()
    return cfg.get_settings()


def resolve_log_level(requested: str | None, settings: cfg.CatalogSettings) -> str:
    if requested:
        return requested
    configured = settings.log_level.strip().lower()
    return configured if configured in UVICORN_LOG_LEVELS else "info"


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and launch the uvicorn server."""

    args = build_parser().parse_args(argv)
    settings = apply_overrides(args)
    log_level = resolve_log_level(args.log_level, settings)
    logging_manager.configure_logging_level(log_level=log_level)

    if not file_ops.validate_library_path(settings.library_root):
        logging_manager.console_error(
            "Library root %s is not a readable directory; scans will fail until it is mounted.",
            settings.library_root,
        )

    uvicorn.run(
        APP_FACTORY,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=log_level,
        factory=True,
    )


if __name__ == "__main__":  # pragma: no cover - CLI integration
    try:
        main()
    except KeyboardInterrupt:  # pragma: no cover - user initiated shutdown
        logging.getLogger(__name__).info("Server interrupted by user")
