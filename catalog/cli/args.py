"""Argument parsing for the audiobook catalog command line interface."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from ..library import ScanType


def build_cli_parser() -> argparse.ArgumentParser:
    """Build the CLI parser with one sub-command per library operation."""

    parser = argparse.ArgumentParser(
        description="audiobook catalog command line interface", allow_abbrev=False
    )
    parser.add_argument(
        "--library-path",
        dest="library_path",
        help="Override the configured library root for this invocation.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser(
        "scan", help="Scan the library and reconcile it with the catalog", allow_abbrev=False
    )
    scan_parser.add_argument(
        "--type",
        dest="scan_type",
        choices=[scan_type.value for scan_type in ScanType],
        default=ScanType.MANUAL.value,
        help="Scan trigger recorded on the run (default: %(default)s).",
    )

    subparsers.add_parser(
        "status", help="Show the most recent scan run", allow_abbrev=False
    )

    history_parser = subparsers.add_parser(
        "history", help="List recent scan runs", allow_abbrev=False
    )
    history_parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Number of runs to display (default: %(default)s).",
    )

    subparsers.add_parser(
        "stats", help="Show catalog statistics", allow_abbrev=False
    )
    subparsers.add_parser(
        "validate", help="Check that the library root is a readable directory", allow_abbrev=False
    )
    return parser


def parse_cli_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse ``argv`` with :func:`build_cli_parser`."""

    return build_cli_parser().parse_args(argv)


__all__ = ["build_cli_parser", "parse_cli_args"]
