"""Exceptions raised by the library scanning workflow."""

from __future__ import annotations


class LibraryError(RuntimeError):
    """Base class for library-related failures."""


class ScanInProgressError(LibraryError):
    """Raised when a scan is requested while another one is running."""

    def __init__(self, run_id: int | None = None) -> None:
        self.run_id = run_id
        super().__init__("Library scan already in progress")


class LibraryScanError(LibraryError):
    """Raised when a scan cannot traverse the library at all."""


class LibraryNotFoundError(LibraryError):
    """Raised when an expected scan run or book does not exist."""


__all__ = [
    "LibraryError",
    "LibraryNotFoundError",
    "LibraryScanError",
    "ScanInProgressError",
]
