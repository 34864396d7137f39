"""SQLAlchemy database layer for the audiobook catalog.

Provides the engine factory, session helpers, and declarative base used by
the catalog repository.
"""

from .base import Base
from .engine import (
    create_catalog_engine,
    create_session_factory,
    dispose_engine,
    get_engine,
    get_session_factory,
    init_database,
    session_scope,
)

__all__ = [
    "Base",
    "create_catalog_engine",
    "create_session_factory",
    "dispose_engine",
    "get_engine",
    "get_session_factory",
    "init_database",
    "session_scope",
]
