"""Convocatorias API: password-protected announcement uploads and downloads."""

from __future__ import annotations

import logging
import time

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fauna_api.core.config import get_settings
from fauna_api.core.errors import install_error_handlers
from fauna_api.core.log_setup import configure_logging
from fauna_api.core.middleware import RequestLogMiddleware, SecurityHeadersMiddleware, parse_origins
from fauna_api.core.rate_limiter import RateLimiter, enforce_rate_limit
from fauna_api.routers import convocatorias as convocatorias_router
from fauna_api.routers import health as health_router
from fauna_api.services.convocatoria_service import ConvocatoriaService

logger = logging.getLogger("fauna.convocatorias_app")


def create_convocatorias_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Convocatorias API", dependencies=[Depends(enforce_rate_limit)])
    app.state.started_at = time.monotonic()
    app.state.rate_limiter = RateLimiter(settings.rate_limit_max, settings.rate_limit_window_seconds)

    service = ConvocatoriaService()
    service.init_storage()
    app.state.convocatoria_service = service

    install_error_handlers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_origins(settings.cors_origin),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(SecurityHeadersMiddleware, enforce_hsts=settings.app_env == "prod")
    app.add_middleware(RequestLogMiddleware)

    app.include_router(health_router.router)
    app.include_router(convocatorias_router.router)

    logger.info("Convocatorias API ready (dir=%s)", settings.convocatorias_dir)
    return app


app = create_convocatorias_app()
