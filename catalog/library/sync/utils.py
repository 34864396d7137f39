"""Shared helpers for library scanning."""

from __future__ import annotations

import base64
import binascii
from datetime import datetime, timezone
from pathlib import Path, PurePosixPath
from typing import Any, Optional, Type

from ..library_models import ScanType


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""

    return datetime.now(timezone.utc)


def relative_library_path(library_root: Path, target: Path) -> str:
    """Return ``target`` relative to ``library_root`` using POSIX separators."""

    relative = Path(target).relative_to(Path(library_root))
    return PurePosixPath(*relative.parts).as_posix()


def encode_external_key(relative_path: str) -> str:
    """Encode a library-relative path into the catalog's external key."""

    return base64.b64encode(relative_path.encode("utf-8")).decode("ascii")


def decode_external_key(key: str) -> str:
    """Recover the library-relative path an external key was derived from."""

    try:
        return base64.b64decode(key.encode("ascii"), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeError) as exc:
        raise ValueError(f"Invalid external key '{key}'") from exc


def normalize_scan_type(value: Any, *, error_cls: Type[Exception]) -> ScanType:
    """Normalize ``value`` to a :class:`ScanType`."""

    if isinstance(value, ScanType):
        return value
    candidate = str(value or "").strip().lower()
    try:
        return ScanType(candidate)
    except ValueError:
        allowed = ", ".join(member.value for member in ScanType)
        raise error_cls(f"Invalid scan type '{value}'. Must be one of: {allowed}") from None


def coerce_int(value: Any) -> Optional[int]:
    """Coerce ``value`` to an integer if possible."""

    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        pass
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


def to_string(value: Any) -> Optional[str]:
    """Return a trimmed string or ``None`` for ``value``."""

    if isinstance(value, str):
        trimmed = value.strip()
        return trimmed or None
    if value is None:
        return None
    return str(value)


__all__ = [
    "coerce_int",
    "decode_external_key",
    "encode_external_key",
    "normalize_scan_type",
    "relative_library_path",
    "to_string",
    "utc_now",
]
