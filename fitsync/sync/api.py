# -*- coding: utf-8 -*-
"""Sync domain — API endpoints."""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends, Request

from ..activity.storage import log_request_activity
from ..app_db import AppDatabase, utc_now
from ..auth.security import get_current_user
from ..deps import get_db
from ..errors import internal_error
from .models import SyncSaveRequest, SyncSaveResponse, SyncSnapshot, SyncUser
from .storage import get_all, put_all

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/sync", tags=["Sync"])


@router.get("", response_model=SyncSnapshot, summary="Export every document of the current user")
def sync_get(request: Request, user: dict = Depends(get_current_user), db: AppDatabase = Depends(get_db)):
    user_id = user["userId"]
    logger.info("Sync request from user %s", user_id)
    try:
        data = get_all(db, user_id)
    except sqlite3.Error as exc:
        log_request_activity(db, user_id, "SYNC_ERROR", str(exc), request)
        raise internal_error("Synchronization failed", exc)

    log_request_activity(
        db,
        user_id,
        "SYNC_GET",
        f"Retrieved {len(data['nutrition'])} nutrition months, {len(data['workouts'])} workout months",
        request,
    )
    return SyncSnapshot(
        nutrition=data["nutrition"],
        workouts=data["workouts"],
        settings=data["settings"],
        lastSync=utc_now(),
        user=SyncUser(id=user_id, email=user.get("email")),
    )


@router.post("", response_model=SyncSaveResponse, summary="Import documents in one transaction")
def sync_save(
    request: Request,
    body: Optional[SyncSaveRequest] = None,
    user: dict = Depends(get_current_user),
    db: AppDatabase = Depends(get_db),
):
    body = body or SyncSaveRequest()
    user_id = user["userId"]
    logger.info("Bulk save request from user %s", user_id)
    try:
        operations = put_all(db, user_id, body.model_dump())
    except sqlite3.Error as exc:
        log_request_activity(db, user_id, "SYNC_SAVE_ERROR", str(exc), request)
        raise internal_error("Bulk save failed", exc)

    log_request_activity(db, user_id, "SYNC_SAVE", f"Saved {operations} items", request)
    logger.info("Bulk save completed for user %s: %s operations", user_id, operations)
    return SyncSaveResponse(message="Synchronization completed", operations=operations, timestamp=utc_now())
