# -*- coding: utf-8 -*-
"""Documents — per-kind API endpoints (nutrition, workouts, settings)."""

from __future__ import annotations

import sqlite3
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request

from ..activity.storage import log_request_activity
from ..app_db import AppDatabase
from ..auth.security import get_current_user
from ..deps import get_db
from ..errors import ApiError, internal_error
from ..sync.storage import DocumentKind, get_document, get_settings, list_documents, put_document, put_settings
from .models import (
    DocumentResponse,
    DocumentSaved,
    DocumentWriteRequest,
    NutritionListResponse,
    SettingsResponse,
    SettingsSaved,
    SettingsWriteRequest,
    WorkoutListResponse,
    is_missing,
)

nutrition_router = APIRouter(prefix="/api/nutrition", tags=["Nutrition"])
workouts_router = APIRouter(prefix="/api/workouts", tags=["Workouts"])
settings_router = APIRouter(prefix="/api/settings", tags=["Settings"])

_LABELS = {
    DocumentKind.NUTRITION: ("nutrition data", "NUTRITION_SAVE"),
    DocumentKind.WORKOUTS: ("workout data", "WORKOUT_SAVE"),
}


def _list(db: AppDatabase, user_id: int, kind: DocumentKind) -> Dict[str, Any]:
    try:
        return list_documents(db, user_id, kind)
    except sqlite3.Error as exc:
        raise internal_error(f"Failed to load {_LABELS[kind][0]}", exc)


def _get_one(db: AppDatabase, user_id: int, kind: DocumentKind, month_key: str) -> DocumentResponse:
    try:
        data = get_document(db, user_id, kind, month_key)
    except sqlite3.Error as exc:
        raise internal_error(f"Failed to load {_LABELS[kind][0]}", exc)
    if data is None:
        raise ApiError(404, f"No {_LABELS[kind][0]} for {month_key}", "NOT_FOUND")
    return DocumentResponse(monthKey=month_key, data=data)


def _save(
    db: AppDatabase,
    user_id: int,
    kind: DocumentKind,
    month_key: str,
    body: DocumentWriteRequest,
    request: Request,
) -> DocumentSaved:
    label, action = _LABELS[kind]
    if is_missing(body.data):
        raise ApiError(400, f"{label.capitalize()} required", "MISSING_DATA")
    try:
        row_id = put_document(db, user_id, kind, month_key, body.data)
    except sqlite3.Error as exc:
        raise internal_error(f"Failed to save {label}", exc)

    log_request_activity(db, user_id, action, f"Saved {label} for {month_key}", request)
    return DocumentSaved(message=f"{label.capitalize()} saved", monthKey=month_key, rowId=row_id)


# ---- nutrition ----


@nutrition_router.get("", response_model=NutritionListResponse, summary="All nutrition months")
def nutrition_list(user: dict = Depends(get_current_user), db: AppDatabase = Depends(get_db)):
    return NutritionListResponse(nutrition=_list(db, user["userId"], DocumentKind.NUTRITION))


@nutrition_router.get("/{month_key}", response_model=DocumentResponse, summary="One nutrition month")
def nutrition_get(month_key: str, user: dict = Depends(get_current_user), db: AppDatabase = Depends(get_db)):
    return _get_one(db, user["userId"], DocumentKind.NUTRITION, month_key)


@nutrition_router.post("/{month_key}", response_model=DocumentSaved, summary="Replace one nutrition month")
def nutrition_save(
    month_key: str,
    request: Request,
    body: Optional[DocumentWriteRequest] = None,
    user: dict = Depends(get_current_user),
    db: AppDatabase = Depends(get_db),
):
    return _save(db, user["userId"], DocumentKind.NUTRITION, month_key, body or DocumentWriteRequest(), request)


# ---- workouts ----


@workouts_router.get("", response_model=WorkoutListResponse, summary="All workout months")
def workouts_list(user: dict = Depends(get_current_user), db: AppDatabase = Depends(get_db)):
    return WorkoutListResponse(workouts=_list(db, user["userId"], DocumentKind.WORKOUTS))


@workouts_router.get("/{month_key}", response_model=DocumentResponse, summary="One workout month")
def workouts_get(month_key: str, user: dict = Depends(get_current_user), db: AppDatabase = Depends(get_db)):
    return _get_one(db, user["userId"], DocumentKind.WORKOUTS, month_key)


@workouts_router.post("/{month_key}", response_model=DocumentSaved, summary="Replace one workout month")
def workouts_save(
    month_key: str,
    request: Request,
    body: Optional[DocumentWriteRequest] = None,
    user: dict = Depends(get_current_user),
    db: AppDatabase = Depends(get_db),
):
    return _save(db, user["userId"], DocumentKind.WORKOUTS, month_key, body or DocumentWriteRequest(), request)


# ---- settings ----


@settings_router.get("", response_model=SettingsResponse, summary="User settings")
def settings_get(user: dict = Depends(get_current_user), db: AppDatabase = Depends(get_db)):
    try:
        return SettingsResponse(settings=get_settings(db, user["userId"]))
    except sqlite3.Error as exc:
        raise internal_error("Failed to load settings", exc)


@settings_router.post("", response_model=SettingsSaved, summary="Replace user settings")
def settings_save(
    request: Request,
    body: Optional[SettingsWriteRequest] = None,
    user: dict = Depends(get_current_user),
    db: AppDatabase = Depends(get_db),
):
    body = body or SettingsWriteRequest()
    if is_missing(body.settings):
        raise ApiError(400, "Settings required", "MISSING_SETTINGS")
    user_id = user["userId"]
    try:
        row_id = put_settings(db, user_id, body.settings)
    except sqlite3.Error as exc:
        raise internal_error("Failed to save settings", exc)

    log_request_activity(db, user_id, "SETTINGS_SAVE", "Settings updated", request)
    return SettingsSaved(message="Settings saved", rowId=row_id)
