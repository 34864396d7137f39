"""Pydantic schemas for the FastAPI web backend."""

from __future__ import annotations

from .library import (
    GenreCountPayload,
    LibraryCounts,
    LibraryStatsResponse,
    LibraryValidationResponse,
    Pagination,
    RecentBookPayload,
    ScanHistoryResponse,
    ScanRunPayload,
    ScanStartRequest,
    ScanStartResponse,
    ScanStatusResponse,
)

__all__ = [
    "GenreCountPayload",
    "LibraryCounts",
    "LibraryStatsResponse",
    "LibraryValidationResponse",
    "Pagination",
    "RecentBookPayload",
    "ScanHistoryResponse",
    "ScanRunPayload",
    "ScanStartRequest",
    "ScanStartResponse",
    "ScanStatusResponse",
]
