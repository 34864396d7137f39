"""Application factory for the FastAPI backend."""

from __future__ import annotations

import logging
import os
import re

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from catalog import config_manager as cfg
from catalog import load_environment
from catalog import logging_manager as log_mgr

from .routers.library import router as library_router

load_environment()

LOGGER = logging.getLogger(__name__)

# Default origins considered safe for local development convenience.
DEFAULT_LOCAL_ORIGINS = (
    "http://localhost",
    "http://127.0.0.1",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


def _parse_cors_origins(raw_value: str | None) -> tuple[list[str], bool]:
    """Return the allowed origins and whether credentials are supported."""

    if raw_value is None:
        return list(DEFAULT_LOCAL_ORIGINS), True

    tokens = [token.strip() for token in re.split(r"[\s,]+", raw_value) if token.strip()]
    if not tokens:
        return [], False
    if "*" in tokens:
        return ["*"], False
    return tokens, True


def _configure_cors(app: FastAPI) -> None:
    allowed_origins, allow_credentials = _parse_cors_origins(
        os.environ.get("CATALOG_API_CORS_ORIGINS")
    )
    if not allowed_origins:
        LOGGER.info("CORS middleware disabled; no allowed origins configured.")
        return

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=allow_credentials,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def create_app() -> FastAPI:
    """Instantiate and configure the FastAPI application."""

    settings = cfg.get_settings()
    log_mgr.configure_logging_level(log_level=settings.log_level)

    app = FastAPI(title="audiobook-catalog API", version="0.1.0")

    _configure_cors(app)

    @app.get("/api/health", tags=["health"])
    def healthcheck() -> dict[str, str]:
        """Simple healthcheck endpoint for smoke-testing the server."""

        return {"status": "ok"}

    app.include_router(library_router)

    LOGGER.info("Catalog API configured for library root %s", settings.library_root)
    return app
