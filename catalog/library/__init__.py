"""Library feature package exports."""

from .catalog_repository import CatalogRepository
from .exceptions import LibraryError, LibraryNotFoundError, LibraryScanError, ScanInProgressError
from .library_models import (
    BookRecord,
    CatalogBook,
    LibraryStats,
    ReconcileOutcome,
    ScanError,
    ScanResults,
    ScanRunRecord,
    ScanState,
    ScanStatus,
    ScanType,
)
from .library_scanner import LibraryScanner
from .sync.db_sync import CatalogReconciler
from .sync.file_ops import list_child_directories, validate_library_path
from .sync.metadata import LibraryMetadataExtractor

__all__ = [
    "BookRecord",
    "CatalogBook",
    "CatalogReconciler",
    "CatalogRepository",
    "LibraryError",
    "LibraryMetadataExtractor",
    "LibraryNotFoundError",
    "LibraryScanError",
    "LibraryScanner",
    "LibraryStats",
    "ReconcileOutcome",
    "ScanError",
    "ScanInProgressError",
    "ScanResults",
    "ScanRunRecord",
    "ScanState",
    "ScanStatus",
    "ScanType",
    "list_child_directories",
    "validate_library_path",
]
