# -*- coding: utf-8 -*-
"""
Fitness sync backend.

Stores per-user nutrition / workout months and settings as JSON documents, with bearer
token auth and an activity log.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .admin.api import router as admin_router
from .app_db import AppDatabase, utc_now
from .auth.api import router as auth_router
from .auth.storage import count_users
from .config import Settings
from .documents.api import nutrition_router, settings_router, workouts_router
from .errors import register_exception_handlers
from .logging_setup import setup_logging
from .sync.api import router as sync_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    db: AppDatabase = app.state.db
    logger.info("Fitness sync backend ready (environment: %s)", settings.environment)
    try:
        logger.info("Current users: %s", count_users(db))
    except sqlite3.Error as exc:
        logger.error("Failed to count users at startup: %s", exc)
    yield
    logger.info("Graceful shutdown completed")


def create_app(settings: Optional[Settings] = None, db: Optional[AppDatabase] = None) -> FastAPI:
    settings = settings or Settings()
    setup_logging(settings.log_level)

    logger.info("Starting fitness sync backend")
    logger.info("Environment: %s", settings.environment)
    logger.info("Database path: %s", settings.db_path)
    logger.info("CORS origins: %s", ",".join(settings.cors_origins))
    if settings.uses_default_secret:
        level = logging.ERROR if settings.is_production else logging.WARNING
        logger.log(level, "JWT_SECRET is not set; using the built-in development secret")

    if db is None:
        db = AppDatabase(settings.db_path)
    db.init()
    logger.info("Database tables initialized")

    app = FastAPI(
        title="Fitness Sync Backend",
        description="Per-user nutrition, workout and settings sync.",
        version=settings.version,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = db
    app.state.started_at = time.monotonic()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def _request_log(request: Request, call_next):
        host = request.client.host if request.client else "-"
        logger.info("%s %s from %s", request.method, request.url.path, host)
        return await call_next(request)

    max_body_bytes = settings.max_body_mb * 1024 * 1024

    @app.middleware("http")
    async def _limit_body_size(request: Request, call_next):
        try:
            length = int(request.headers.get("content-length") or 0)
        except ValueError:
            length = 0
        if length > max_body_bytes:
            logger.warning("Rejected %s %s: body of %s bytes", request.method, request.url.path, length)
            return JSONResponse(
                status_code=413,
                content={"error": f"Request body too large (> {settings.max_body_mb} MB)", "code": "PAYLOAD_TOO_LARGE"},
            )
        return await call_next(request)

    register_exception_handlers(app)

    app.include_router(admin_router)
    app.include_router(auth_router)
    app.include_router(sync_router)
    app.include_router(nutrition_router)
    app.include_router(workouts_router)
    app.include_router(settings_router)

    @app.get("/", include_in_schema=False)
    def root() -> dict:
        return {
            "message": "Fitness App Backend API",
            "version": settings.version,
            "status": "active",
            "endpoints": {
                "health": "GET /api/health",
                "auth": ["POST /api/auth/register", "POST /api/auth/login"],
                "sync": ["GET /api/sync", "POST /api/sync"],
                "data": [
                    "GET/POST /api/nutrition",
                    "GET/POST /api/workouts",
                    "GET/POST /api/settings",
                ],
            },
            "environment": settings.environment,
            "timestamp": utc_now(),
        }

    return app


def run() -> None:
    import uvicorn

    settings = Settings()
    uvicorn.run("fitsync.main:create_app", factory=True, host=settings.host, port=settings.port, reload=False)


if __name__ == "__main__":
    run()
