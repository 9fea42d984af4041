# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
DripBox — FastAPI Application Entry Point
Creates the app, registers lifespan events, CORS, routers,
and global error handlers.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.middleware.error_handler import register_error_handlers
from app.api.routes import assets, sessions, textures
from app.config import get_settings
from app.dependencies import get_session_store, init_session_store, shutdown_session_store
from app.modules.assets.catalog import get_catalog
from app.utils.logger import configure_logging, get_logger

log = get_logger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Startup: configure logging, load the texture catalog, initialise the SessionStore.
    Shutdown: close live sessions and release their bitmaps.
    """
    # ── Startup ──────────────────────────────────────────────────────────────
    configure_logging()
    settings = get_settings()
    catalog = get_catalog()

    log.info(
        "dripbox_startup",
        version=VERSION,
        surface_size=settings.surface_size,
        default_pixel_ratio=settings.default_pixel_ratio,
        textures=len(catalog),
        default_texture=catalog.default.id,
        template_ref=settings.template_ref,
        asset_base_url=settings.asset_base_url,
    )

    init_session_store()

    log.info("dripbox_ready")
    yield

    # ── Shutdown ─────────────────────────────────────────────────────────────
    shutdown_session_store()
    log.info("dripbox_shutdown")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="DripBox",
        summary="Lid designer compositor: texture, artwork, and print-ready preview.",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Error Handlers ───────────────────────────────────────────────────────
    register_error_handlers(app)

    # ── Routers ──────────────────────────────────────────────────────────────
    app.include_router(textures.router)
    app.include_router(sessions.router)
    app.include_router(assets.router)

    # ── Health Check ─────────────────────────────────────────────────────────
    @app.get("/health", tags=["health"], summary="Health check")
    async def health() -> dict:
        return {
            "status": "ok",
            "service": "dripbox",
            "version": VERSION,
            "sessions": get_session_store().count(),
            "surface_size": settings.surface_size,
        }

    return app


# Module-level app instance for uvicorn
app = create_app()


def run() -> None:
    """Serve the API with uvicorn on HOST:PORT from settings."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "app.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
