"""Filesystem helpers for walking the author/title library tree."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import List, Sequence

from catalog import logging_manager

from conf.scan_config import SKIPPED_PREFIXES

LOGGER = logging_manager.get_logger().getChild("library.sync.file_ops")


def validate_library_path(root: Path | str) -> bool:
    """Return ``True`` when ``root`` exists and is a directory.

    Never raises: stat failures and non-directories are reported as ``False``
    with a warning naming the path.
    """

    path = Path(root)
    try:
        stat_result = path.stat()
    except OSError as exc:
        LOGGER.warning(
            "Library path validation failed for %s: %s",
            path,
            exc,
            extra={"event": "library.validate.failed", "path": str(path)},
        )
        return False
    if not stat.S_ISDIR(stat_result.st_mode):
        LOGGER.warning(
            "Library path %s is not a directory",
            path,
            extra={"event": "library.validate.failed", "path": str(path)},
        )
        return False
    return True


def is_skipped_name(name: str, prefixes: Sequence[str] = SKIPPED_PREFIXES) -> bool:
    """Return ``True`` for hidden/system entries such as ``.git`` or ``_trash``."""

    return name.startswith(tuple(prefixes))


def list_child_directories(path: Path | str) -> List[str]:
    """Return the visible sub-directory names of ``path``.

    The listing is read from disk on every call. Raises :class:`OSError` when
    ``path`` cannot be listed.
    """

    names: List[str] = []
    with os.scandir(path) as entries:
        for entry in entries:
            if is_skipped_name(entry.name):
                continue
            try:
                if not entry.is_dir():
                    continue
            except OSError:
                LOGGER.debug("Skipping unreadable entry %s", entry.path)
                continue
            names.append(entry.name)
    return sorted(names)


def list_files(path: Path | str) -> List[str]:
    """Return the names of the regular files directly inside ``path``, sorted."""

    names: List[str] = []
    with os.scandir(path) as entries:
        for entry in entries:
            if entry.is_file():
                names.append(entry.name)
    return sorted(names)


__all__ = [
    "is_skipped_name",
    "list_child_directories",
    "list_files",
    "validate_library_path",
]
