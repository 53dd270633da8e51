"""FastAPI application for the watch-party signaling relay."""
from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response

from .core.config import APP_NAME, APP_VERSION, Settings, get_settings
from .core.logging_config import configure_logging
from .core.security import SecurityHeadersMiddleware
from .routers.signaling import router as signaling_router
from .schemas.signaling import HealthResponse, StatsResponse, StatusResponse
from .services.hub import SignalingHub

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the application; each instance owns its own signaling hub."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        app.state.hub = SignalingHub(
            outbox_max_size=settings.outbox_max_size,
            renotify_on_rejoin=settings.renotify_on_rejoin,
        )
        logger.info("Signaling hub started (%s)", settings.app_env)
        yield
        stats = app.state.hub.stats()
        logger.info(
            "Signaling hub stopped with %d connection(s) in %d room(s)",
            stats["connections"],
            stats["rooms"],
        )

    app = FastAPI(title="Watch Party Signaling", version=APP_VERSION, lifespan=lifespan)

    if settings.security_headers:
        app.add_middleware(SecurityHeadersMiddleware)

    if settings.cors_allow_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_allow_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    @app.get("/", response_model=StatusResponse, tags=["meta"])
    async def index() -> StatusResponse:
        """Identify the service."""

        return StatusResponse(status="ok", name=APP_NAME, version=APP_VERSION)

    @app.head("/", tags=["meta"])
    async def index_head() -> Response:
        """Fast health checks issue HEAD /; answer with 200 to avoid noisy 405s."""

        return Response(status_code=200)

    @app.get("/api/health", response_model=HealthResponse, tags=["meta"])
    async def health() -> HealthResponse:
        """Simple liveness probe."""

        return HealthResponse(status="ok")

    @app.head("/api/health", tags=["meta"])
    async def health_head() -> Response:
        return Response(status_code=200)

    @app.get("/api/stats", response_model=StatsResponse, tags=["meta"])
    async def stats(request: Request) -> StatsResponse:
        """Current room and connection counts."""

        return StatsResponse(**request.app.state.hub.stats())

    app.include_router(signaling_router, tags=["signaling"])
    return app


app = create_app()
