"""Single-flight coordination of full library scans."""

from __future__ import annotations

import threading
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional

from catalog import logging_manager

from .catalog_repository import CatalogRepository
from .exceptions import LibraryError, LibraryScanError, ScanInProgressError
from .library_models import ReconcileOutcome, ScanResults, ScanState, ScanStatus, ScanType
from .sync import file_ops, utils
from .sync.db_sync import CatalogReconciler
from .sync.metadata import LibraryMetadataExtractor

LOGGER = logging_manager.get_logger().getChild("library.scanner")


class LibraryScanner:
    """Walk ``<root>/<author>/<title>`` and reconcile every title with the catalog.

    One instance is created per process and shared by reference. At most one
    run is active at a time; a second start request is rejected with
    :class:`ScanInProgressError` rather than queued. Every run leaves one
    ``scan_history`` row that ends either ``completed`` or ``failed``.
    """

    def __init__(
        self,
        *,
        library_root: Path,
        repository: CatalogRepository,
        extractor: Optional[LibraryMetadataExtractor] = None,
        reconciler: Optional[CatalogReconciler] = None,
        clock: Callable[[], datetime] = utils.utc_now,
    ) -> None:
        self._library_root = Path(library_root)
        self._repository = repository
        self._clock = clock
        self._extractor = extractor or LibraryMetadataExtractor(self._library_root, clock=clock)
        self._reconciler = reconciler or CatalogReconciler(repository)
        self._lock = threading.Lock()
        self._state = ScanState.IDLE
        self._current_run_id: Optional[int] = None

    @property
    def library_root(self) -> Path:
        return self._library_root

    @property
    def repository(self) -> CatalogRepository:
        return self._repository

    def validate(self) -> bool:
        """Return whether the configured library root is a readable directory."""

        return file_ops.validate_library_path(self._library_root)

    def status(self) -> ScanStatus:
        with self._lock:
            return ScanStatus(state=self._state, current_run_id=self._current_run_id)

    def start(self, scan_type: ScanType | str = ScanType.MANUAL) -> ScanResults:
        """Run a scan to completion in the calling thread and return its results.

        Raises :class:`ScanInProgressError` when another run is active, and
        re-raises any run-level failure after recording it on the run row.
        """

        normalized = utils.normalize_scan_type(scan_type, error_cls=LibraryError)
        run_id = self._claim(normalized)
        return self._execute(run_id, normalized)

    def start_in_background(self, scan_type: ScanType | str = ScanType.MANUAL) -> int:
        """Claim a run synchronously, then traverse the library in a daemon thread.

        Returns the id of the new ``scan_history`` row.
        """

        normalized = utils.normalize_scan_type(scan_type, error_cls=LibraryError)
        run_id = self._claim(normalized)
        worker = threading.Thread(
            target=self._run_detached,
            args=(run_id, normalized),
            name=f"library-scan-{run_id}",
            daemon=True,
        )
        try:
            worker.start()
        except RuntimeError as exc:
            self._mark_failed(run_id, exc, None)
            self._release(ScanState.FAILED)
            raise
        return run_id

    def _run_detached(self, run_id: int, scan_type: ScanType) -> None:
        try:
            self._execute(run_id, scan_type)
        except Exception:
            LOGGER.exception(
                "Background library scan %s failed",
                run_id,
                extra={"event": "scan.background_failed", "scan_id": run_id},
            )

    def _claim(self, scan_type: ScanType) -> int:
        with self._lock:
            if self._state is ScanState.RUNNING:
                raise ScanInProgressError(self._current_run_id)
            self._state = ScanState.RUNNING
            self._current_run_id = None

        # The insert runs unlocked; status() reports RUNNING with no run id meanwhile.
        try:
            run_id = self._repository.create_scan_run(scan_type, started_at=self._clock())
        except Exception:
            self._release(ScanState.IDLE)
            raise

        with self._lock:
            self._current_run_id = run_id
        return run_id

    def _release(self, terminal: ScanState) -> None:
        with self._lock:
            self._state = terminal
            self._current_run_id = None

    def _execute(self, run_id: int, scan_type: ScanType) -> ScanResults:
        terminal = ScanState.FAILED
        results = ScanResults()
        try:
            with logging_manager.log_context(scan_id=run_id, scan_type=scan_type.value):
                LOGGER.info(
                    "Starting library scan of %s",
                    self._library_root,
                    extra={"event": "scan.started"},
                )
                try:
                    self._perform_scan(results)
                    self._repository.complete_scan_run(
                        run_id, completed_at=self._clock(), results=results
                    )
                except Exception as exc:
                    self._mark_failed(run_id, exc, results)
                    LOGGER.error(
                        "Library scan failed: %s",
                        exc,
                        exc_info=True,
                        extra={"event": "scan.failed", "status": ScanState.FAILED.value},
                    )
                    raise
                terminal = ScanState.COMPLETED
                LOGGER.info(
                    "Library scan completed: found=%s added=%s updated=%s errors=%s",
                    results.books_found,
                    results.books_added,
                    results.books_updated,
                    len(results.errors),
                    extra={"event": "scan.completed", "status": ScanState.COMPLETED.value},
                )
                return results
        finally:
            self._release(terminal)

    def _mark_failed(
        self, run_id: int, exc: BaseException, results: Optional[ScanResults]
    ) -> None:
        try:
            self._repository.fail_scan_run(
                run_id,
                completed_at=self._clock(),
                error_message=str(exc) or exc.__class__.__name__,
                results=results,
            )
        except Exception:
            LOGGER.exception("Unable to record failure for scan run %s", run_id)

    def _perform_scan(self, results: ScanResults) -> None:
        root = self._library_root
        try:
            author_dirs = file_ops.list_child_directories(root)
        except OSError as exc:
            raise LibraryScanError(
                f"Library root {root} is not accessible: {exc.strerror or exc}"
            ) from exc

        for author_dir in author_dirs:
            author_path = root / author_dir
            LOGGER.debug("Scanning author: %s", author_dir)
            try:
                title_dirs = file_ops.list_child_directories(author_path)
            except Exception as exc:
                if not root.is_dir():
                    raise LibraryScanError(
                        f"Library root {root} disappeared during the scan"
                    ) from exc
                LOGGER.warning(
                    "Failed to scan author: %s",
                    author_path,
                    exc_info=True,
                    extra={"event": "scan.author_failed", "path": str(author_path)},
                )
                results.record_error(str(author_path), exc)
                continue

            for title_dir in title_dirs:
                self._scan_title(results, author_path / title_dir, author_dir, title_dir)

    def _scan_title(
        self, results: ScanResults, title_path: Path, author_dir: str, title_dir: str
    ) -> None:
        try:
            record = self._extractor.extract(title_path, author_dir, title_dir)
            if record is None:
                return
            results.books_found += 1
            outcome = self._reconciler.reconcile(record)
        except Exception as exc:
            LOGGER.warning(
                "Failed to scan book: %s",
                title_path,
                exc_info=True,
                extra={"event": "scan.item_failed", "path": str(title_path)},
            )
            results.record_error(str(title_path), exc)
            return

        if outcome is ReconcileOutcome.UPDATED:
            results.books_updated += 1
        else:
            results.books_added += 1


__all__ = ["LibraryScanner"]
