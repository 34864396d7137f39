"""Pydantic models and helper utilities for configuration values."""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_DATABASE_URL,
    DEFAULT_HISTORY_PAGE_LIMIT,
    DEFAULT_LIBRARY_PATH,
    DEFAULT_LOG_LEVEL,
    SENSITIVE_CONFIG_KEYS,
)


class CatalogSettings(BaseSettings):
    """Typed representation of the catalog configuration.

    Values are sourced from environment variables (already populated from any
    ``.env`` files by :func:`catalog.environment.load_environment`).
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        populate_by_name=True,
    )

    library_path: str = Field(
        default=str(DEFAULT_LIBRARY_PATH),
        validation_alias=AliasChoices(
            "library_path", "CATALOG_LIBRARY_PATH", "AUDIOBOOKSHELF_LIBRARY_PATH"
        ),
    )
    database_url: SecretStr = Field(
        default=SecretStr(DEFAULT_DATABASE_URL),
        validation_alias=AliasChoices("database_url", "DATABASE_URL", "CATALOG_DATABASE_URL"),
    )
    log_level: str = Field(
        default=DEFAULT_LOG_LEVEL,
        validation_alias=AliasChoices("log_level", "CATALOG_LOG_LEVEL"),
    )
    history_page_limit: int = Field(
        default=DEFAULT_HISTORY_PAGE_LIMIT,
        ge=1,
        validation_alias=AliasChoices("history_page_limit", "CATALOG_HISTORY_PAGE_LIMIT"),
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.strip().upper() or DEFAULT_LOG_LEVEL

    @property
    def library_root(self) -> Path:
        return Path(self.library_path).expanduser()

    def redacted(self) -> Dict[str, Any]:
        """Return a loggable view of the settings with secrets masked."""

        payload = self.model_dump()
        for key in SENSITIVE_CONFIG_KEYS:
            if payload.get(key) is not None:
                payload[key] = "***"
        return payload


@lru_cache(maxsize=1)
def get_settings() -> CatalogSettings:
    """Return the process-wide settings instance."""

    return CatalogSettings()


def reset_settings_cache() -> None:
    """Forget cached settings so the next call re-reads the environment."""

    get_settings.cache_clear()
