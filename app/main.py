"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request

from app.api.errors import register_exception_handlers
from app.api.middleware import BodySizeLimitMiddleware, RequestLoggingMiddleware
from app.api.v1.router import api_router
from app.core.config import Settings, settings as default_settings
from app.core.logging import setup_logging
from app.db.init_db import init_db
from app.db.session import Database

logger = logging.getLogger(__name__)


def create_app(config: Optional[Settings] = None, database: Optional[Database] = None) -> FastAPI:
    """
    Build the application.

    Args:
        config: settings to use, the process-wide settings by default
        database: an existing Database to serve from; one is created from
            ``config`` at startup otherwise. Either way it is disposed of at
            shutdown.
    """
    config = config or default_settings
    setup_logging(config.LOG_LEVEL)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        db = database or Database(config)
        if config.DATABASE_CREATE_TABLES:
            init_db(db)
        app.state.db = db
        app.state.started_at = time.monotonic()
        logger.info("%s %s started (environment: %s)", config.PROJECT_NAME, config.VERSION, config.ENVIRONMENT)
        try:
            yield
        finally:
            db.dispose()

    app = FastAPI(
        title=config.PROJECT_NAME,
        version=config.VERSION,
        description="User management API: create, list, search, update and delete users.",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan)
    app.state.settings = config

    # Added last runs first: size check happens before anything else
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=config.MAX_BODY_BYTES)

    register_exception_handlers(app)

    # Include API router
    app.include_router(api_router, prefix="/api")

    @app.get("/")
    async def root():
        """Root endpoint - API index."""
        return {
            "message": f"Welcome to the {config.PROJECT_NAME}",
            "version": config.VERSION,
            "endpoints": {
                "users": "/api/users",
                "health": "/api/health",
            },
        }

    @app.get("/api/health")
    def health_check(request: Request):
        """Health check endpoint for monitoring."""
        db: Database = request.app.state.db
        return {
            "status": "OK",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "uptime": round(time.monotonic() - request.app.state.started_at, 3),
            "version": config.VERSION,
            "database": "up" if db.ping() else "down",
        }

    return app


app = create_app()
