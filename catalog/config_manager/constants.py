"""Shared constants for the configuration manager package."""
from __future__ import annotations

from pathlib import Path

MODULE_DIR = Path(__file__).resolve().parent
SCRIPT_DIR = MODULE_DIR.parent.parent.resolve()

DEFAULT_LIBRARY_PATH = Path("/audiobooks")
DEFAULT_DATABASE_URL = f"sqlite:///{SCRIPT_DIR / 'catalog.db'}"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_HISTORY_PAGE_LIMIT = 100
SENSITIVE_CONFIG_KEYS = {"database_url"}
