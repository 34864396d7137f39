from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from catalog.library import LibraryScanner, ScanType
from catalog.webapi.dependencies import get_library_scanner

pytestmark = pytest.mark.webapi


def test_healthcheck(client: TestClient) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_start_scan_runs_in_background(client, scanner, build_title, wait_idle) -> None:
    build_title("Isaac Asimov", "Foundation", sidecar={"genres": ["Science Fiction"]})

    response = client.post("/api/library/scan", json={"type": "full"})

    assert response.status_code == 202
    payload = response.json()
    assert payload["scanType"] == "full"
    assert payload["status"] == "started"
    run_id = payload["runId"]

    wait_idle(scanner)
    status_payload = client.get("/api/library/scan/status").json()
    assert status_payload["isScanning"] is False
    assert status_payload["currentScanId"] is None
    latest = status_payload["latestScan"]
    assert latest["id"] == run_id
    assert latest["status"] == "completed"
    assert latest["booksFound"] == 1
    assert latest["booksAdded"] == 1


def test_start_scan_defaults_to_manual(client, scanner, wait_idle) -> None:
    response = client.post("/api/library/scan")

    assert response.status_code == 202
    assert response.json()["scanType"] == "manual"
    wait_idle(scanner)


def test_start_scan_rejects_unknown_type(client, repository) -> None:
    response = client.post("/api/library/scan", json={"type": "weekly"})

    assert response.status_code == 422
    assert repository.count_scan_runs() == 0


def test_start_scan_rejects_invalid_library_path(webapi_app, tmp_path, repository, clock) -> None:
    missing = LibraryScanner(library_root=tmp_path / "missing", repository=repository, clock=clock)
    webapi_app.dependency_overrides[get_library_scanner] = lambda: missing

    with TestClient(webapi_app) as client:
        response = client.post("/api/library/scan", json={"type": "manual"})

    assert response.status_code == 400
    assert "does not exist or is not accessible" in response.json()["detail"]
    assert repository.count_scan_runs() == 0


def test_start_scan_conflicts_while_running(
    webapi_app, library_root, repository, clock, build_title, blocking_extractor, wait_idle
) -> None:
    build_title("Author", "Slow Book")
    busy = LibraryScanner(
        library_root=library_root,
        repository=repository,
        extractor=blocking_extractor,
        clock=clock,
    )
    webapi_app.dependency_overrides[get_library_scanner] = lambda: busy

    with TestClient(webapi_app) as client:
        first = client.post("/api/library/scan", json={"type": "manual"})
        assert blocking_extractor.entered.wait(timeout=5)
        status_payload = client.get("/api/library/scan/status").json()
        second = client.post("/api/library/scan", json={"type": "full"})
        blocking_extractor.release.set()
        wait_idle(busy)

    assert first.status_code == 202
    assert status_payload["isScanning"] is True
    assert status_payload["currentScanId"] == first.json()["runId"]
    assert second.status_code == 409
    assert second.json()["detail"] == "Library scan already in progress"
    assert repository.count_scan_runs() == 1


def test_scan_history_paginates(client, scanner) -> None:
    for _ in range(3):
        scanner.start(ScanType.MANUAL)

    response = client.get("/api/library/scan/history", params={"page": 2, "limit": 2})

    assert response.status_code == 200
    payload = response.json()
    assert payload["pagination"] == {"page": 2, "limit": 2, "total": 3, "pages": 2}
    assert len(payload["scans"]) == 1
    assert payload["scans"][0]["status"] == "completed"


def test_scan_history_validates_query(client) -> None:
    assert client.get("/api/library/scan/history", params={"page": 0}).status_code == 422


def test_get_scan_run_not_found(client) -> None:
    response = client.get("/api/library/scan/12345")

    assert response.status_code == 404


def test_library_stats(client, scanner, build_title) -> None:
    build_title("Isaac Asimov", "Foundation", sidecar={"genres": ["Science Fiction"]})
    build_title("Isaac Asimov", "I, Robot", sidecar={"genres": ["Science Fiction", "Robots"]})
    scanner.start()

    payload = client.get("/api/library/stats").json()

    assert payload["counts"] == {"books": 2, "authors": 1, "genres": 2}
    assert len(payload["recentlyAdded"]) == 2
    assert payload["topGenres"][0] == {"name": "Science Fiction", "count": 2}


def test_validate_reports_library_state(webapi_app, client, library_root, tmp_path, repository, clock) -> None:
    valid = client.get("/api/library/validate").json()
    assert valid["isValid"] is True
    assert valid["path"] == str(library_root)
    assert valid["error"] is None
    assert valid["timestamp"]

    missing = LibraryScanner(library_root=tmp_path / "gone", repository=repository, clock=clock)
    webapi_app.dependency_overrides[get_library_scanner] = lambda: missing
    invalid = client.get("/api/library/validate").json()

    assert invalid["isValid"] is False
    assert invalid["error"] == "Library path does not exist or is not accessible"
