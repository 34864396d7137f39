"""Dependency wiring for the FastAPI application."""

from __future__ import annotations

from functools import lru_cache

from .. import config_manager as cfg
from .. import logging_manager as log_mgr
from ..database import get_session_factory
from ..library import CatalogRepository, LibraryScanner


logger = log_mgr.logger


@lru_cache
def get_catalog_repository() -> CatalogRepository:
    """Return the process-wide :class:`CatalogRepository`."""

    return CatalogRepository(get_session_factory())


@lru_cache
def get_library_scanner() -> LibraryScanner:
    """Return the shared :class:`LibraryScanner` bound to the configured root."""

    library_root = cfg.get_library_root()
    logger.debug("Library scanner bound to %s", library_root)
    return LibraryScanner(library_root=library_root, repository=get_catalog_repository())


def get_settings() -> cfg.CatalogSettings:
    return cfg.get_settings()


__all__ = ["get_catalog_repository", "get_library_scanner", "get_settings"]
