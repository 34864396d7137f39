"""Load ``.env``-style files before configuration is read."""

from __future__ import annotations

import os
from pathlib import Path
from typing import List, Optional, Tuple

from dotenv import load_dotenv

PROJECT_ROOT = Path(__file__).resolve().parents[1]
ENV_FILE_VARIABLE = "CATALOG_ENV_FILE"
ENV_TARGET_VARIABLE = "CATALOG_ENV"

_LOADED_FILES: Optional[Tuple[Path, ...]] = None


def candidate_env_files(root: Path = PROJECT_ROOT) -> List[Path]:
    """Return dotenv paths in precedence order, without duplicates.

    Explicit ``CATALOG_ENV_FILE`` entries (``os.pathsep`` separated) come first,
    then ``.env``, ``.env.<CATALOG_ENV>`` and ``.env.local`` under ``root``.
    Earlier files win because values are never overridden once set.
    """

    explicit = [
        Path(value).expanduser()
        for value in os.environ.get(ENV_FILE_VARIABLE, "").split(os.pathsep)
        if value.strip()
    ]
    names = [".env"]
    target = os.environ.get(ENV_TARGET_VARIABLE, "").strip()
    if target:
        names.append(f".env.{target}")
    names.append(".env.local")

    ordered: List[Path] = []
    for path in explicit + [root / name for name in names]:
        resolved = path.resolve()
        if resolved not in ordered:
            ordered.append(resolved)
    return ordered


def load_environment(*, force: bool = False) -> Tuple[Path, ...]:
    """Populate ``os.environ`` from the dotenv files that exist.

    Already-set variables are left alone. The result is cached so that the CLI
    and the API share one load per process unless ``force`` is passed.
    """

    global _LOADED_FILES
    if _LOADED_FILES is not None and not force:
        return _LOADED_FILES

    _LOADED_FILES = tuple(
        path
        for path in candidate_env_files()
        if path.is_file() and load_dotenv(path, override=False)
    )
    return _LOADED_FILES


__all__ = ["candidate_env_files", "load_environment"]
