"""Structured logging for the audiobook catalog.

Every record is rendered as one JSON object. Values pushed with
:func:`log_context` (for example the ``scan_id`` of the active run) are copied
onto each record by the handlers, so child loggers obtained through
``get_logger().getChild(...)`` inherit them without extra wiring.
"""

from __future__ import annotations

import contextlib
import contextvars
import json
import logging
import os
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Dict, Iterator, Optional

MODULE_DIR = Path(__file__).resolve().parent
SCRIPT_DIR = MODULE_DIR.parent.resolve()
LOG_DIR = Path(os.environ.get("CATALOG_LOG_DIR") or SCRIPT_DIR / "log")
LOG_FILE = LOG_DIR / "catalog.log"
LOGGER_NAME = "audiobook_catalog"
DEFAULT_LOG_LEVEL = logging.INFO
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 5

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime", "taskName"}

_logger: Optional[logging.Logger] = None
_log_context: contextvars.ContextVar[Dict[str, object]] = contextvars.ContextVar(
    "audiobook_catalog_log_context", default={}
)


class JSONLogFormatter(logging.Formatter):
    """Render log records as single-line JSON documents."""

    DEFAULT_FIELDS: tuple[str, ...] = (
        "scan_id",
        "scan_type",
        "event",
        "path",
        "duration_ms",
        "status",
    )

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401
        payload: Dict[str, object] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "pid": record.process,
            "thread": record.threadName,
        }
        payload.update(
            (field, getattr(record, field))
            for field in self.DEFAULT_FIELDS
            if getattr(record, field, None) is not None
        )

        extra = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and key not in self.DEFAULT_FIELDS
        }
        if extra:
            payload["extra"] = extra
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class LogContextFilter(logging.Filter):
    """Copy the active :func:`log_context` values onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: D401
        for key, value in _log_context.get().items():
            setattr(record, key, value)
        return True


def _build_handlers() -> list[logging.Handler]:
    formatter = JSONLogFormatter()
    context_filter = LogContextFilter()
    handlers: list[logging.Handler] = [
        RotatingFileHandler(LOG_FILE, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS),
        logging.StreamHandler(),
    ]
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
    return handlers


def setup_logging(log_level: int = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Configure the catalog logger once and return it."""
    global _logger

    if _logger is None:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
        configured = logging.getLogger(LOGGER_NAME)
        configured.propagate = False
        for handler in _build_handlers():
            configured.addHandler(handler)
        _logger = configured

    configure_logging_level(log_level=log_level)
    return _logger


def get_logger() -> logging.Logger:
    """Return the catalog logger, initializing it on first use."""

    if _logger is None:
        return setup_logging()
    return _logger


def configure_logging_level(debug_enabled: bool = False, log_level: Optional[int | str] = None) -> int:
    """Apply ``log_level`` (a name or number) or the debug preference to every handler."""
    target = get_logger()
    if log_level is None:
        level = logging.DEBUG if debug_enabled else DEFAULT_LOG_LEVEL
    elif isinstance(log_level, str):
        resolved = logging.getLevelName(log_level.strip().upper())
        level = resolved if isinstance(resolved, int) else DEFAULT_LOG_LEVEL
    else:
        level = log_level
    target.setLevel(level)
    for handler in target.handlers:
        handler.setLevel(level)
    return level


def get_log_context() -> Dict[str, object]:
    """Return a copy of the active structured logging context."""

    return dict(_log_context.get())


def push_log_context(**values: object) -> contextvars.Token[Dict[str, object]]:
    merged = {**_log_context.get(), **{k: v for k, v in values.items() if v is not None}}
    return _log_context.set(merged)


def pop_log_context(token: contextvars.Token[Dict[str, object]]) -> None:
    _log_context.reset(token)


@contextlib.contextmanager
def log_context(**values: object) -> Iterator[None]:
    """Attach ``values`` to every record logged inside the ``with`` block."""

    token = push_log_context(**values)
    try:
        yield
    finally:
        pop_log_context(token)


def clear_log_context() -> None:
    _log_context.set({})


def console_info(message: str, *args: object, logger_obj: Optional[logging.Logger] = None) -> None:
    """Print ``message`` for the operator and record it at INFO level."""

    text = message % args if args else message
    print(text, file=sys.stdout)
    (logger_obj or get_logger()).info(text)


def console_error(message: str, *args: object, logger_obj: Optional[logging.Logger] = None) -> None:
    """Print ``message`` to stderr and record it at ERROR level."""

    text = message % args if args else message
    print(text, file=sys.stderr)
    (logger_obj or get_logger()).error(text)


logger = get_logger()
