"""
Public API: uploaded files (upload/list/search/delete) and the animal catalog.

``app`` is the default instance for uvicorn; tests build isolated instances
with ``create_app()`` after pointing DATA_DIR/UPLOADS_DIR at a temp dir.
"""

from __future__ import annotations

import logging
import time

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fauna_api.core.config import get_settings
from fauna_api.core.errors import install_error_handlers
from fauna_api.core.log_setup import configure_logging
from fauna_api.core.middleware import (
    CachedStaticFiles,
    JsonBodyLimitMiddleware,
    RequestLogMiddleware,
    SecurityHeadersMiddleware,
    parse_origins,
)
from fauna_api.core.rate_limiter import RateLimiter, enforce_rate_limit
from fauna_api.routers import animals as animals_router
from fauna_api.routers import files as files_router
from fauna_api.routers import health as health_router
from fauna_api.services.animal_service import AnimalService
from fauna_api.services.file_service import FileService

logger = logging.getLogger("fauna.app")

UPLOADS_MAX_AGE = 7 * 24 * 60 * 60


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Fauna API", dependencies=[Depends(enforce_rate_limit)])
    app.state.started_at = time.monotonic()
    app.state.rate_limiter = RateLimiter(settings.rate_limit_max, settings.rate_limit_window_seconds)

    file_service = FileService(uploads_dir=settings.uploads_dir)
    file_service.init_storage()
    animal_service = AnimalService()
    animal_service.init_storage()
    app.state.file_service = file_service
    app.state.animal_service = animal_service

    install_error_handlers(app)

    app.add_middleware(JsonBodyLimitMiddleware, max_bytes=settings.json_body_limit)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_origins(settings.cors_origin),
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    app.add_middleware(RequestLogMiddleware)

    app.mount(
        "/uploads",
        CachedStaticFiles(directory=str(settings.uploads_dir), max_age=UPLOADS_MAX_AGE),
        name="uploads",
    )

    app.include_router(health_router.router)
    app.include_router(files_router.router)
    app.include_router(animals_router.router)

    logger.info("Fauna API ready (data=%s, uploads=%s)", settings.data_dir, settings.uploads_dir)
    return app


app = create_app()
