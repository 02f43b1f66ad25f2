"""FastAPI application — the headmaster state-source service.

This module wires together:
- the configured activity source
- per-subject settings and activity override stores
- the summary cache and evaluation service
- summary / status / settings / override routes
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta

import httpx
import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from disciplinator.api.routes.activity import router as activity_router
from disciplinator.api.routes.settings import router as settings_router
from disciplinator.cache import SummaryCache
from disciplinator.config import Settings, get_settings
from disciplinator.service import EvaluationService
from disciplinator.sources.registry import get_source
from disciplinator.stores import OverrideStore, SettingsStore, default_subject_settings

logger = structlog.get_logger(__name__)


def build_service(settings: Settings) -> EvaluationService:
    """Assemble an :class:`EvaluationService` from application settings."""
    return EvaluationService(
        source=get_source(settings.activity_source, settings),
        settings_store=SettingsStore(default_subject_settings(settings)),
        override_store=OverrideStore(),
        cache=SummaryCache(ttl=timedelta(seconds=settings.summary_cache_ttl_seconds)),
    )


def create_app(service: EvaluationService | None = None) -> FastAPI:
    """Create the API.  Without *service* one is built from settings at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings = get_settings()
        app.state.service = service or build_service(settings)
        logger.info("server.started", source=settings.activity_source, port=settings.api_port)

        yield  # ← application runs

        await app.state.service.close()
        logger.info("server.stopped")

    app = FastAPI(
        title="Disciplinator Headmaster",
        description="Activity-debt evaluation for wearable activity data.",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.exception_handler(httpx.HTTPError)
    async def upstream_unavailable(request: Request, exc: httpx.HTTPError) -> JSONResponse:
        logger.error("server.upstream_unavailable", path=request.url.path, error=str(exc))
        return JSONResponse(status_code=502, content={"detail": "Activity source unavailable."})

    @app.get("/health", tags=["system"])
    async def health():
        return {"status": "ok"}

    app.include_router(activity_router)
    app.include_router(settings_router)
    return app


app = create_app()
