# -*- coding: utf-8 -*-
"""Admin — health check, stats and activity logs.

`/api/admin/stats` and `/api/logs` accept any valid token; there is no admin role.
"""

from __future__ import annotations

import logging
import sqlite3
import time
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ..activity.storage import clamp_limit, recent_activity
from ..app_db import AppDatabase, utc_now
from ..auth.security import get_current_user
from ..auth.storage import count_users
from ..config import Settings
from ..deps import get_db, get_settings
from ..errors import internal_error
from .storage import get_stats

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Admin"])


def _uptime(request: Request) -> float:
    started_at = getattr(request.app.state, "started_at", None)
    if started_at is None:
        return 0.0
    return round(time.monotonic() - started_at, 3)


@router.get("/api/health", summary="Liveness + database check")
def health(request: Request, db: AppDatabase = Depends(get_db), settings: Settings = Depends(get_settings)) -> dict:
    payload = {
        "status": "OK",
        "timestamp": utc_now(),
        "uptime": _uptime(request),
        "environment": settings.environment,
        "database": "connected",
        "version": settings.version,
    }
    try:
        payload["users_count"] = count_users(db)
    except sqlite3.Error as exc:
        logger.warning("Health check database query failed: %s", exc)
        payload["database"] = "error"
        payload["status"] = "WARNING"
    return payload


@router.get("/api/admin/stats", summary="Aggregate counters")
def admin_stats(request: Request, user: dict = Depends(get_current_user), db: AppDatabase = Depends(get_db)) -> dict:
    try:
        stats = get_stats(db)
    except sqlite3.Error as exc:
        raise internal_error("Failed to load statistics", exc)
    return {"stats": stats, "server_uptime": _uptime(request), "timestamp": utc_now()}


@router.get("/api/logs", summary="Recent activity of the current user")
def activity_logs(
    limit: Optional[str] = Query(default=None, description="1-100, default 50"),
    user: dict = Depends(get_current_user),
    db: AppDatabase = Depends(get_db),
) -> dict:
    try:
        logs = recent_activity(db, user["userId"], clamp_limit(limit))
    except sqlite3.Error as exc:
        raise internal_error("Failed to load logs", exc)
    return {"logs": logs}
