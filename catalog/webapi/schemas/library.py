"""Schemas for the library scan API endpoints."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ScanTypeLiteral = Literal["manual", "full", "incremental"]


class ScanStartRequest(BaseModel):
    """Payload for starting a library scan."""

    type: ScanTypeLiteral = "manual"


class ScanStartResponse(BaseModel):
    """Response returned once a background scan has been claimed."""

    model_config = ConfigDict(populate_by_name=True)

    scan_type: ScanTypeLiteral = Field(alias="scanType")
    status: Literal["started"] = "started"
    run_id: int = Field(alias="runId")


class ScanRunPayload(BaseModel):
    """Serializable representation of a ``scan_history`` row."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    scan_type: str = Field(alias="scanType")
    status: Literal["running", "completed", "failed"]
    started_at: Optional[datetime] = Field(alias="startedAt", default=None)
    completed_at: Optional[datetime] = Field(alias="completedAt", default=None)
    books_found: int = Field(alias="booksFound", default=0)
    books_added: int = Field(alias="booksAdded", default=0)
    books_updated: int = Field(alias="booksUpdated", default=0)
    books_removed: int = Field(alias="booksRemoved", default=0)
    error_message: Optional[str] = Field(alias="errorMessage", default=None)
    scan_results: Optional[Dict[str, Any]] = Field(alias="scanResults", default=None)


class ScanStatusResponse(BaseModel):
    """Current coordinator state plus the most recent run."""

    model_config = ConfigDict(populate_by_name=True)

    is_scanning: bool = Field(alias="isScanning")
    current_scan_id: Optional[int] = Field(alias="currentScanId", default=None)
    latest_scan: Optional[ScanRunPayload] = Field(alias="latestScan", default=None)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class ScanHistoryResponse(BaseModel):
    scans: List[ScanRunPayload] = Field(default_factory=list)
    pagination: Pagination


class RecentBookPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    created_at: Optional[datetime] = Field(alias="createdAt", default=None)


class GenreCountPayload(BaseModel):
    name: str
    count: int


class LibraryCounts(BaseModel):
    books: int
    authors: int
    genres: int


class LibraryStatsResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    counts: LibraryCounts
    recently_added: List[RecentBookPayload] = Field(alias="recentlyAdded", default_factory=list)
    top_genres: List[GenreCountPayload] = Field(alias="topGenres", default_factory=list)


class LibraryValidationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_valid: bool = Field(alias="isValid")
    path: str
    timestamp: datetime
    error: Optional[str] = None


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
    "ScanTypeLiteral",
]
