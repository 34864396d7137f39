"""Top-level dispatch for the audiobook catalog command line interface."""

from __future__ import annotations

from typing import Optional, Sequence

from .. import config_manager as cfg
from .. import logging_manager as log_mgr
from .args import parse_cli_args
from .library_commands import execute_library_command

logger = log_mgr.get_logger().getChild("cli")


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    """Primary console script entry point."""

    args = parse_cli_args(argv)
    if args.debug:
        log_mgr.configure_logging_level(debug_enabled=True)
    else:
        log_mgr.configure_logging_level(log_level=cfg.get_settings().log_level)

    logger.debug("Dispatching CLI command %s", args.command)
    return execute_library_command(args)


__all__ = ["run_cli"]
