"""Metadata extraction for a single author/title directory."""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from catalog import logging_manager

from conf.scan_config import (
    AUDIO_SUFFIXES,
    COVER_PATTERN,
    DEFAULT_LANGUAGE,
    EBOOK_SUFFIXES,
    EXACT_COVER_FILENAME,
    FORMAT_PRIORITY,
    SIDECAR_FILENAME,
    UNKNOWN_FORMAT,
)

from ..library_models import BookRecord
from . import file_ops, utils

LOGGER = logging_manager.get_logger().getChild("library.sync.metadata")


@dataclass(frozen=True)
class FileBuckets:
    """Files of a title directory grouped by role."""

    audio: Tuple[str, ...] = ()
    covers: Tuple[str, ...] = ()
    ebooks: Tuple[str, ...] = ()


def _suffix(name: str) -> str:
    return Path(name).suffix.lower()


def classify_files(names: Iterable[str]) -> FileBuckets:
    """Split ``names`` into audio, cover image and ebook buckets, keeping order."""

    audio: List[str] = []
    covers: List[str] = []
    ebooks: List[str] = []
    for name in names:
        suffix = _suffix(name)
        if suffix in AUDIO_SUFFIXES:
            audio.append(name)
        if COVER_PATTERN.match(name) or name == EXACT_COVER_FILENAME:
            covers.append(name)
        if suffix in EBOOK_SUFFIXES:
            ebooks.append(name)
    return FileBuckets(audio=tuple(audio), covers=tuple(covers), ebooks=tuple(ebooks))


def detect_format(audio_files: Sequence[str]) -> str:
    """Return the highest-priority audio format present in ``audio_files``."""

    suffixes = {_suffix(name) for name in audio_files}
    for candidate in FORMAT_PRIORITY:
        if f".{candidate}" in suffixes:
            return candidate
    return UNKNOWN_FORMAT


def load_sidecar(title_dir: Path) -> Dict[str, Any]:
    """Read the sidecar metadata document of ``title_dir``.

    A missing file yields an empty mapping. An unreadable or malformed file is
    logged as a warning and also yields an empty mapping.
    """

    sidecar_path = title_dir / SIDECAR_FILENAME
    try:
        with sidecar_path.open("r", encoding="utf-8") as handle:
            payload = json.load(handle)
    except FileNotFoundError:
        return {}
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        LOGGER.warning(
            "Failed to parse %s in %s: %s",
            SIDECAR_FILENAME,
            title_dir,
            exc,
            extra={"event": "scan.sidecar_invalid", "path": str(title_dir)},
        )
        return {}
    if not isinstance(payload, dict):
        LOGGER.warning(
            "Ignoring %s in %s: expected an object, got %s",
            SIDECAR_FILENAME,
            title_dir,
            type(payload).__name__,
            extra={"event": "scan.sidecar_invalid", "path": str(title_dir)},
        )
        return {}
    return payload


def resolve_text(value: Any) -> Optional[str]:
    """Return the text a sidecar field carries, or ``None``.

    Strings are trimmed, numbers are rendered (``1`` -> ``"1"``) and a list
    contributes its first usable scalar. Booleans, objects and blanks carry
    no text.
    """

    if isinstance(value, (list, tuple)):
        for candidate in value:
            if isinstance(candidate, (list, tuple)):
                continue
            text = resolve_text(candidate)
            if text:
                return text
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        return utils.to_string(value)
    if isinstance(value, (int, float)):
        return str(value)
    return None


def resolve_published_date(value: Any) -> Optional[date]:
    """Map a publish year onto January 1st of that year."""

    year = utils.coerce_int(value)
    if year is None or not 1 <= year <= 9999:
        if value not in (None, ""):
            LOGGER.debug("Ignoring unparseable publish year %r", value)
        return None
    return date(year, 1, 1)


def resolve_duration(value: Any) -> int:
    seconds = utils.coerce_int(value)
    if seconds is None or seconds < 0:
        return 0
    return seconds


def resolve_genres(value: Any) -> Tuple[str, ...]:
    """Return distinct, non-blank genre names in their original order."""

    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        return ()
    genres: List[str] = []
    for candidate in value:
        if not isinstance(candidate, str):
            continue
        name = candidate.strip()
        if name and name not in genres:
            genres.append(name)
    return tuple(genres)


class LibraryMetadataExtractor:
    """Build :class:`BookRecord` objects from title directories.

    Extraction never touches the database. A directory without audio files is
    not a book and yields ``None``.
    """

    def __init__(
        self,
        library_root: Path,
        *,
        clock: Callable[[], datetime] = utils.utc_now,
    ) -> None:
        self._library_root = Path(library_root)
        self._clock = clock

    @property
    def library_root(self) -> Path:
        return self._library_root

    def external_key_for(self, title_dir: Path) -> str:
        relative = utils.relative_library_path(self._library_root, title_dir)
        return utils.encode_external_key(relative)

    def extract(
        self,
        title_dir: Path,
        author_dir_name: str,
        title_dir_name: str,
    ) -> Optional[BookRecord]:
        title_dir = Path(title_dir)
        names = file_ops.list_files(title_dir)
        sidecar = load_sidecar(title_dir) if SIDECAR_FILENAME in names else {}
        buckets = classify_files(names)

        if not buckets.audio:
            LOGGER.debug("No audio files found in %s", title_dir)
            return None

        return self._build_record(title_dir, author_dir_name, title_dir_name, sidecar, buckets)

    def _build_record(
        self,
        title_dir: Path,
        author_dir_name: str,
        title_dir_name: str,
        sidecar: Mapping[str, Any],
        buckets: FileBuckets,
    ) -> BookRecord:
        series_name = resolve_text(sidecar.get("series"))
        cover_path = str(title_dir / buckets.covers[0]) if buckets.covers else None
        description = resolve_text(sidecar.get("description")) or resolve_text(
            sidecar.get("summary")
        )

        return BookRecord(
            external_key=self.external_key_for(title_dir),
            title=resolve_text(sidecar.get("title")) or title_dir_name,
            subtitle=resolve_text(sidecar.get("subtitle")),
            author_name=resolve_text(sidecar.get("author")) or author_dir_name,
            description=description,
            isbn=resolve_text(sidecar.get("isbn")),
            asin=resolve_text(sidecar.get("asin")),
            language=resolve_text(sidecar.get("language")) or DEFAULT_LANGUAGE,
            publisher=resolve_text(sidecar.get("publisher")),
            published_date=resolve_published_date(sidecar.get("publishedYear")),
            duration_seconds=resolve_duration(sidecar.get("duration")),
            format=detect_format(buckets.audio),
            cover_image_path=cover_path,
            file_path=str(title_dir),
            series_name=series_name,
            series_sequence=resolve_text(sidecar.get("sequence")),
            is_series=series_name is not None,
            genres=resolve_genres(sidecar.get("genres")),
            audio_files=buckets.audio,
            ebook_files=buckets.ebooks,
            last_scanned=self._clock(),
        )


__all__ = [
    "FileBuckets",
    "LibraryMetadataExtractor",
    "classify_files",
    "detect_format",
    "load_sidecar",
    "resolve_duration",
    "resolve_genres",
    "resolve_published_date",
    "resolve_text",
]
