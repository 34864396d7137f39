"""Routes powering library scans and catalog statistics."""

from __future__ import annotations

import math

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..dependencies import get_catalog_repository, get_library_scanner, get_settings
from ..schemas import (
    LibraryCounts,
    LibraryStatsResponse,
    LibraryValidationResponse,
    Pagination,
    ScanHistoryResponse,
    ScanRunPayload,
    ScanStartRequest,
    ScanStartResponse,
    ScanStatusResponse,
)
from ... import config_manager as cfg
from ... import logging_manager as log_mgr
from ...library import (
    CatalogRepository,
    LibraryError,
    LibraryNotFoundError,
    LibraryScanner,
    ScanInProgressError,
    ScanRunRecord,
)
from ...library.sync import utils


router = APIRouter(prefix="/api/library", tags=["library"])

logger = log_mgr.get_logger().getChild("webapi.library")

INVALID_PATH_MESSAGE = "Library path does not exist or is not accessible"


def _serialize_run(record: ScanRunRecord | None) -> ScanRunPayload | None:
    if record is None:
        return None
    return ScanRunPayload.model_validate(record.as_payload())


@router.post(
    "/scan",
    response_model=ScanStartResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def start_library_scan(
    payload: ScanStartRequest | None = None,
    scanner: LibraryScanner = Depends(get_library_scanner),
):
    scan_type = payload.type if payload else "manual"
    if not scanner.validate():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{INVALID_PATH_MESSAGE}: {scanner.library_root}",
        )

    try:
        run_id = scanner.start_in_background(scan_type)
    except ScanInProgressError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except LibraryError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    logger.info(
        "Library scan %s requested via API",
        run_id,
        extra={"event": "scan.requested", "scan_id": run_id, "scan_type": scan_type},
    )
    return ScanStartResponse(scan_type=scan_type, run_id=run_id)


@router.get("/scan/status", response_model=ScanStatusResponse)
async def get_scan_status(
    scanner: LibraryScanner = Depends(get_library_scanner),
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    current = scanner.status()
    return ScanStatusResponse(
        is_scanning=current.is_scanning,
        current_scan_id=current.current_run_id,
        latest_scan=_serialize_run(repository.latest_scan_run()),
    )


@router.get("/scan/history", response_model=ScanHistoryResponse)
async def get_scan_history(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1),
    repository: CatalogRepository = Depends(get_catalog_repository),
    settings: cfg.CatalogSettings = Depends(get_settings),
):
    limit = min(limit, settings.history_page_limit)
    offset = (page - 1) * limit
    runs = repository.list_scan_runs(limit=limit, offset=offset)
    total = repository.count_scan_runs()
    return ScanHistoryResponse(
        scans=[_serialize_run(run) for run in runs],
        pagination=Pagination(
            page=page,
            limit=limit,
            total=total,
            pages=math.ceil(total / limit) if total else 0,
        ),
    )


@router.get("/scan/{run_id}", response_model=ScanRunPayload)
async def get_scan_run(
    run_id: int,
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    try:
        record = repository.get_scan_run(run_id)
    except LibraryNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _serialize_run(record)


@router.get("/stats", response_model=LibraryStatsResponse)
async def get_library_stats(
    repository: CatalogRepository = Depends(get_catalog_repository),
):
    stats = repository.get_library_stats()
    return LibraryStatsResponse(
        counts=LibraryCounts(books=stats.books, authors=stats.authors, genres=stats.genres),
        recently_added=stats.recently_added,
        top_genres=stats.top_genres,
    )


@router.get("/validate", response_model=LibraryValidationResponse)
async def validate_library(
    scanner: LibraryScanner = Depends(get_library_scanner),
):
    is_valid = scanner.validate()
    return LibraryValidationResponse(
        is_valid=is_valid,
        path=str(scanner.library_root),
        timestamp=utils.utc_now(),
        error=None if is_valid else INVALID_PATH_MESSAGE,
    )


__all__ = ["router"]
