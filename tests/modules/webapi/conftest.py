"""Shared fixtures for WebAPI route tests."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from catalog.library import CatalogRepository, LibraryScanner
from catalog.webapi.application import create_app
from catalog.webapi.dependencies import get_catalog_repository, get_library_scanner


@pytest.fixture
def webapi_app(scanner: LibraryScanner, repository: CatalogRepository) -> FastAPI:
    """Create a fresh FastAPI app wired to the test scanner and repository.

    Clears dependency overrides on teardown.
    """
    app = create_app()
    app.dependency_overrides[get_library_scanner] = lambda: scanner
    app.dependency_overrides[get_catalog_repository] = lambda: repository
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(webapi_app: FastAPI) -> TestClient:
    with TestClient(webapi_app) as test_client:
        yield test_client
