"""High-level configuration management for the audiobook catalog."""
from __future__ import annotations

from pathlib import Path

from .constants import (
    DEFAULT_DATABASE_URL,
    DEFAULT_HISTORY_PAGE_LIMIT,
    DEFAULT_LIBRARY_PATH,
    DEFAULT_LOG_LEVEL,
    SCRIPT_DIR,
    SENSITIVE_CONFIG_KEYS,
)
from .settings import CatalogSettings, get_settings, reset_settings_cache


def get_library_root() -> Path:
    """Return the configured library root without touching the filesystem."""

    return get_settings().library_root


def get_database_url() -> str:
    """Return the configured SQLAlchemy database URL."""

    return get_settings().database_url.get_secret_value()


__all__ = [
    "CatalogSettings",
    "DEFAULT_DATABASE_URL",
    "DEFAULT_HISTORY_PAGE_LIMIT",
    "DEFAULT_LIBRARY_PATH",
    "DEFAULT_LOG_LEVEL",
    "SCRIPT_DIR",
    "SENSITIVE_CONFIG_KEYS",
    "get_database_url",
    "get_library_root",
    "get_settings",
    "reset_settings_cache",
]
