"""Library scan commands for the audiobook catalog CLI."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .. import config_manager as cfg
from .. import logging_manager as log_mgr
from ..database import get_session_factory
from ..library import (
    CatalogRepository,
    LibraryError,
    LibraryScanner,
    ScanInProgressError,
    ScanRunRecord,
)

LOGGER = log_mgr.get_logger().getChild("cli.library")


def _create_scanner(
    library_path: Optional[str] = None,
    repository: Optional[CatalogRepository] = None,
) -> LibraryScanner:
    library_root = Path(library_path).expanduser() if library_path else cfg.get_library_root()
    return LibraryScanner(
        library_root=library_root,
        repository=repository or CatalogRepository(get_session_factory()),
    )


def _describe_run(run: ScanRunRecord) -> str:
    started = run.started_at.isoformat() if run.started_at else "-"
    completed = run.completed_at.isoformat() if run.completed_at else "-"
    summary = (
        f"#{run.id} [{run.scan_type}] {run.status} · started {started}"
        f" · finished {completed} · found {run.books_found} · added {run.books_added}"
        f" · updated {run.books_updated} · errors {len(run.errors)}"
    )
    if run.error_message:
        summary += f" · {run.error_message}"
    return summary


def execute_library_command(args, *, repository: Optional[CatalogRepository] = None) -> int:
    """Dispatch the catalog sub-commands and return the process exit status."""

    scanner = _create_scanner(getattr(args, "library_path", None), repository)
    repository = scanner.repository
    command = getattr(args, "command", None)

    if command == "validate":
        if scanner.validate():
            log_mgr.console_info("Library path %s is valid.", scanner.library_root, logger_obj=LOGGER)
            return 0
        log_mgr.console_error(
            f"Library path {scanner.library_root} does not exist or is not accessible.",
            logger_obj=LOGGER,
        )
        return 1

    if command == "scan":
        if not scanner.validate():
            log_mgr.console_error(
                f"Library path {scanner.library_root} does not exist or is not accessible.",
                logger_obj=LOGGER,
            )
            return 1
        try:
            results = scanner.start(args.scan_type)
        except ScanInProgressError as exc:
            log_mgr.console_error(str(exc), logger_obj=LOGGER)
            return 1
        except LibraryError as exc:
            log_mgr.console_error(f"Library scan failed: {exc}", logger_obj=LOGGER)
            return 1

        log_mgr.console_info(
            "Scan complete: %s found, %s added, %s updated, %s errors",
            results.books_found,
            results.books_added,
            results.books_updated,
            len(results.errors),
            logger_obj=LOGGER,
        )
        for error in results.errors:
            log_mgr.console_info("  %s: %s", error.path, error.error, logger_obj=LOGGER)
        return 0

    if command == "status":
        latest = repository.latest_scan_run()
        if latest is None:
            log_mgr.console_info("No scans have been recorded yet.", logger_obj=LOGGER)
            return 0
        log_mgr.console_info(_describe_run(latest), logger_obj=LOGGER)
        return 0

    if command == "history":
        limit = max(1, min(args.limit, cfg.get_settings().history_page_limit))
        runs = repository.list_scan_runs(limit=limit)
        if not runs:
            log_mgr.console_info("No scans have been recorded yet.", logger_obj=LOGGER)
            return 0
        for run in runs:
            log_mgr.console_info(_describe_run(run), logger_obj=LOGGER)
        return 0

    if command == "stats":
        stats = repository.get_library_stats()
        log_mgr.console_info(
            "Books: %s · Authors: %s · Genres: %s",
            stats.books,
            stats.authors,
            stats.genres,
            logger_obj=LOGGER,
        )
        for entry in stats.recently_added:
            log_mgr.console_info("  recently added: %s", entry["title"], logger_obj=LOGGER)
        for entry in stats.top_genres:
            log_mgr.console_info(
                "  genre %s: %s book(s)", entry["name"], entry["count"], logger_obj=LOGGER
            )
        return 0

    log_mgr.console_error(f"Unknown command: {command}", logger_obj=LOGGER)
    return 1


__all__ = ["execute_library_command"]
