"""Support modules for library scanning workflows."""

from . import db_sync, file_ops, metadata, utils

__all__ = [
    "db_sync",
    "file_ops",
    "metadata",
    "utils",
]
