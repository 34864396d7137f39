"""Dataclasses and enums for the library scanning domain."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

if TYPE_CHECKING:  # pragma: no cover - for static analysis only
    from ..database.models import BookModel, ScanHistoryModel


class ScanType(str, Enum):
    """Trigger recorded for a scan run."""

    FULL = "full"
    INCREMENTAL = "incremental"
    MANUAL = "manual"


class ScanState(str, Enum):
    """Lifecycle of a scan run: ``idle -> running -> completed | failed``."""

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class ReconcileOutcome(str, Enum):
    ADDED = "added"
    UPDATED = "updated"


# Columns of ``books`` that an extracted record never overwrites on update.
IDENTITY_FIELDS = frozenset({"external_key"})


@dataclass(frozen=True)
class BookRecord:
    """Normalized metadata extracted from one title directory."""

    external_key: str
    title: str
    author_name: str
    file_path: str
    last_scanned: datetime
    subtitle: Optional[str] = None
    description: Optional[str] = None
    isbn: Optional[str] = None
    asin: Optional[str] = None
    language: str = "en"
    publisher: Optional[str] = None
    published_date: Optional[date] = None
    duration_seconds: int = 0
    format: str = "unknown"
    cover_image_path: Optional[str] = None
    series_name: Optional[str] = None
    series_sequence: Optional[str] = None
    is_series: bool = False
    genres: Tuple[str, ...] = ()
    audio_files: Tuple[str, ...] = ()
    ebook_files: Tuple[str, ...] = ()

    def book_fields(self) -> Dict[str, Any]:
        """Return the values stored on the ``books`` row."""

        return {
            "external_key": self.external_key,
            "title": self.title,
            "subtitle": self.subtitle,
            "description": self.description,
            "isbn": self.isbn,
            "asin": self.asin,
            "language": self.language,
            "publisher": self.publisher,
            "published_date": self.published_date,
            "duration_seconds": self.duration_seconds,
            "format": self.format,
            "cover_image_path": self.cover_image_path,
            "file_path": self.file_path,
            "series_name": self.series_name,
            "series_sequence": self.series_sequence,
            "is_series": self.is_series,
            "last_scanned": self.last_scanned,
        }

    def update_fields(self) -> Dict[str, Any]:
        """Return the non-identity values applied when the book already exists."""

        return {
            key: value
            for key, value in self.book_fields().items()
            if key not in IDENTITY_FIELDS
        }


@dataclass(frozen=True)
class CatalogBook:
    """Detached view of a persisted ``books`` row."""

    id: int
    external_key: str
    title: str
    author_id: Optional[int]
    file_path: str
    format: str
    language: str
    duration_seconds: int
    subtitle: Optional[str] = None
    description: Optional[str] = None
    isbn: Optional[str] = None
    asin: Optional[str] = None
    publisher: Optional[str] = None
    published_date: Optional[date] = None
    cover_image_path: Optional[str] = None
    series_name: Optional[str] = None
    series_sequence: Optional[str] = None
    is_series: bool = False
    last_scanned: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, model: "BookModel") -> "CatalogBook":
        return cls(
            id=model.id,
            external_key=model.external_key,
            title=model.title,
            author_id=model.author_id,
            file_path=model.file_path,
            format=model.format,
            language=model.language,
            duration_seconds=model.duration_seconds or 0,
            subtitle=model.subtitle,
            description=model.description,
            isbn=model.isbn,
            asin=model.asin,
            publisher=model.publisher,
            published_date=model.published_date,
            cover_image_path=model.cover_image_path,
            series_name=model.series_name,
            series_sequence=model.series_sequence,
            is_series=bool(model.is_series),
            last_scanned=model.last_scanned,
            created_at=model.created_at,
        )


@dataclass(frozen=True)
class ScanError:
    """One isolated failure recorded during a run."""

    path: str
    error: str

    def as_payload(self) -> Dict[str, str]:
        return {"path": self.path, "error": self.error}


@dataclass
class ScanResults:
    """Aggregate counters and isolated failures for a single run."""

    books_found: int = 0
    books_added: int = 0
    books_updated: int = 0
    books_removed: int = 0
    errors: List[ScanError] = field(default_factory=list)

    def record_error(self, path: str, exc: BaseException) -> None:
        self.errors.append(ScanError(path=path, error=str(exc) or exc.__class__.__name__))

    def as_payload(self) -> Dict[str, Any]:
        return {
            "books_found": self.books_found,
            "books_added": self.books_added,
            "books_updated": self.books_updated,
            "books_removed": self.books_removed,
            "errors": [error.as_payload() for error in self.errors],
        }


@dataclass(frozen=True)
class ScanRunRecord:
    """Detached view of a ``scan_history`` row."""

    id: int
    scan_type: str
    status: str
    started_at: Optional[datetime]
    completed_at: Optional[datetime] = None
    books_found: int = 0
    books_added: int = 0
    books_updated: int = 0
    books_removed: int = 0
    error_message: Optional[str] = None
    scan_results: Optional[Dict[str, Any]] = None

    @property
    def errors(self) -> List[Dict[str, str]]:
        if not self.scan_results:
            return []
        return list(self.scan_results.get("errors") or [])

    @classmethod
    def from_model(cls, model: "ScanHistoryModel") -> "ScanRunRecord":
        return cls(
            id=model.id,
            scan_type=model.scan_type,
            status=model.status,
            started_at=model.started_at,
            completed_at=model.completed_at,
            books_found=model.books_found or 0,
            books_added=model.books_added or 0,
            books_updated=model.books_updated or 0,
            books_removed=model.books_removed or 0,
            error_message=model.error_message,
            scan_results=model.scan_results,
        )

    def as_payload(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "scan_type": self.scan_type,
            "status": self.status,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "books_found": self.books_found,
            "books_added": self.books_added,
            "books_updated": self.books_updated,
            "books_removed": self.books_removed,
            "error_message": self.error_message,
            "scan_results": self.scan_results,
        }


@dataclass(frozen=True)
class ScanStatus:
    """In-memory snapshot of the coordinator state."""

    state: ScanState
    current_run_id: Optional[int] = None

    @property
    def is_scanning(self) -> bool:
        return self.state is ScanState.RUNNING


@dataclass(frozen=True)
class LibraryStats:
    """Catalog-wide counters and highlights."""

    books: int
    authors: int
    genres: int
    recently_added: List[Dict[str, Any]] = field(default_factory=list)
    top_genres: List[Dict[str, Any]] = field(default_factory=list)


__all__ = [
    "BookRecord",
    "CatalogBook",
    "IDENTITY_FIELDS",
    "LibraryStats",
    "ReconcileOutcome",
    "ScanError",
    "ScanResults",
    "ScanRunRecord",
    "ScanState",
    "ScanStatus",
    "ScanType",
]
