from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from omegaconf import DictConfig

from . import __version__
from .configuration import load_settings
from .database import connect_database, database_status, dispose_database
from .middleware import RateLimiter, RateLimitMiddleware
from .models import HealthStatus
from .routes import mount_route_groups

logger = logging.getLogger(__name__)


def _lifespan(settings: DictConfig):
    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        app.state.engine = connect_database(settings.database.url, settings.database.max_pool_size)
        logger.info(f"Worker {os.getpid()} is running on port {settings.server.port}")
        try:
            yield
        finally:
            dispose_database(app.state.engine)
            app.state.engine = None

    return lifespan


def create_app(settings: DictConfig | None = None) -> FastAPI:
    if settings is None:
        settings = load_settings()

    app = FastAPI(title="Shop API", version=__version__, lifespan=_lifespan(settings))
    app.state.settings = settings
    app.state.engine = None

    # Starlette runs the last added middleware first: CORS, then rate limiting,
    # then compression, then the routes. Compression must sit directly on the
    # routes so it sees the real response size.
    limiter = RateLimiter(
        max_requests=settings.rate_limit.max_requests,
        window_seconds=settings.rate_limit.window_seconds,
    )
    app.state.rate_limiter = limiter
    app.add_middleware(GZipMiddleware, minimum_size=settings.compression.minimum_size)
    app.add_middleware(RateLimitMiddleware, limiter=limiter)

    client_url = settings.cors.client_url
    if not client_url:
        logger.warning("CLIENT_URL is not set; allowing any origin")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[client_url] if client_url else ["*"],
        allow_credentials=settings.cors.credentials,
        allow_methods=list(settings.cors.methods),
        allow_headers=list(settings.cors.headers),
    )

    mount_route_groups(app, settings.routes)

    @app.get("/healthz", response_model=HealthStatus)
    def healthcheck(request: Request) -> HealthStatus:
        return HealthStatus(pid=os.getpid(), database=database_status(request.app.state.engine))

    return app
