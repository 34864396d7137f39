from __future__ import annotations

import json
import os
import tempfile
import threading
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Optional

import pytest

# Keep the rotating log file out of the working tree while tests run.
os.environ.setdefault("CATALOG_LOG_DIR", tempfile.mkdtemp(prefix="catalog-test-logs-"))

from catalog.library import CatalogRepository, LibraryMetadataExtractor, LibraryScanner  # noqa: E402


class TickingClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start: Optional[datetime] = None) -> None:
        self._current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            self._current += timedelta(seconds=1)
            return self._current


class BlockingExtractor(LibraryMetadataExtractor):
    """Extractor that parks the scan until ``release`` is set."""

    def __init__(self, library_root: Path, **kwargs: Any) -> None:
        super().__init__(library_root, **kwargs)
        self.entered = threading.Event()
        self.release = threading.Event()

    def extract(self, title_dir, author_dir_name, title_dir_name):
        self.entered.set()
        self.release.wait(timeout=10)
        return super().extract(title_dir, author_dir_name, title_dir_name)


def wait_until_idle(scanner: LibraryScanner, timeout: float = 10.0) -> None:
    deadline = time.monotonic() + timeout
    while scanner.status().is_scanning:
        if time.monotonic() > deadline:
            raise AssertionError("library scan did not finish in time")
        time.sleep(0.01)


@pytest.fixture
def repository(tmp_path: Path) -> CatalogRepository:
    return CatalogRepository.from_url(f"sqlite:///{tmp_path / 'catalog.db'}")


@pytest.fixture
def library_root(tmp_path: Path) -> Path:
    root = tmp_path / "library"
    root.mkdir()
    return root


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def build_title(library_root: Path) -> Callable[..., Path]:
    """Return a helper creating ``<root>/<author>/<title>`` with files and a sidecar."""

    def _build(
        author: str,
        title: str,
        files: Iterable[str] = ("book.m4b",),
        sidecar: Optional[Dict[str, Any] | str] = None,
    ) -> Path:
        title_dir = library_root / author / title
        title_dir.mkdir(parents=True, exist_ok=True)
        for name in files:
            (title_dir / name).write_bytes(b"\x00")
        if sidecar is not None:
            payload = sidecar if isinstance(sidecar, str) else json.dumps(sidecar)
            (title_dir / "metadata.json").write_text(payload, encoding="utf-8")
        return title_dir

    return _build


@pytest.fixture
def scanner(library_root: Path, repository: CatalogRepository, clock: TickingClock) -> LibraryScanner:
    return LibraryScanner(library_root=library_root, repository=repository, clock=clock)


@pytest.fixture
def blocking_extractor(library_root: Path, clock: TickingClock) -> BlockingExtractor:
    extractor = BlockingExtractor(library_root, clock=clock)
    yield extractor
    extractor.release.set()


@pytest.fixture
def wait_idle() -> Callable[..., None]:
    return wait_until_idle
