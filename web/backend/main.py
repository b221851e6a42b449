#!/usr/bin/env python3
"""
SlotBanBot Web Backend - FastAPI

API JSON + WebSocket pour le dashboard et l'overlay stream.
Le cycle de vie du bot (sweep + chat) est attaché au lifespan de l'app.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.registry import Registry
from web.backend.api.router import router as api_router
from web.backend.api.ws import router as ws_router

logger = logging.getLogger(__name__)


def create_app(registry: Registry, manage_lifecycle: bool = True) -> FastAPI:
    """
    Args:
        registry: Composants du bot (stores, service, hub, IRC)
        manage_lifecycle: Si True, start/stop du registry dans le lifespan
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown events."""
        logger.info("🚀 SlotBanBot Web Backend starting...")
        if manage_lifecycle:
            await registry.start()
        try:
            yield
        finally:
            if manage_lifecycle:
                await registry.stop()
            logger.info("👋 SlotBanBot Web Backend shutting down...")

    app = FastAPI(
        title="SlotBanBot API",
        description="API pour le dashboard et l'overlay slot-ban",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.registry = registry

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Erreurs au format {"error": "..."} attendu par le dashboard
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"❌ Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(status_code=400, content={"error": "Invalid request"})

    app.include_router(api_router, prefix="/api", tags=["API"])
    app.include_router(ws_router, tags=["WebSocket"])

    @app.get("/health")
    async def health():
        """Health check + stats des composants."""
        return {
            "status": "healthy",
            "bans": registry.store.get_stats(),
            "websocket": registry.hub.get_stats(),
            "bus": registry.bus.get_stats(),
            "bot": {
                "connected": registry.irc_client.is_connected(),
                "channels": registry.irc_client.get_channels(),
            },
        }

    return app
