# -*- coding: utf-8 -*-
"""Auth — API endpoints."""

from __future__ import annotations

import logging
import sqlite3
from typing import Optional

from fastapi import APIRouter, Depends, Request

from ..activity.storage import log_request_activity
from ..app_db import AppDatabase
from ..config import Settings
from ..deps import get_db, get_settings
from ..errors import ApiError, internal_error
from .models import MIN_PASSWORD_LENGTH, AuthResponse, LoginRequest, RegisterRequest, UserPublic
from .security import create_access_token, hash_password, verify_password
from .storage import create_user, get_active_user_by_email, get_user_by_email, touch_last_login

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def _missing_fields() -> ApiError:
    return ApiError(400, "Email and password are required", "MISSING_FIELDS")


def _email_exists() -> ApiError:
    return ApiError(400, "Email already registered", "EMAIL_EXISTS")


def _invalid_credentials() -> ApiError:
    return ApiError(400, "Invalid credentials", "INVALID_CREDENTIALS")


@router.post("/register", response_model=AuthResponse, status_code=201, summary="Register a new user")
def register(
    request: Request,
    body: Optional[RegisterRequest] = None,
    db: AppDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    body = body or RegisterRequest()
    if not body.email or not body.password:
        raise _missing_fields()
    if len(body.password) < MIN_PASSWORD_LENGTH:
        raise ApiError(400, f"Password must be at least {MIN_PASSWORD_LENGTH} characters", "PASSWORD_TOO_SHORT")

    try:
        if get_user_by_email(db, body.email):
            raise _email_exists()
        password_hash = hash_password(body.password, settings.bcrypt_rounds)
        user = create_user(db, email=body.email, password_hash=password_hash, name=body.name or "")
    except sqlite3.IntegrityError:
        # Lost a race against a concurrent registration of the same email.
        raise _email_exists()
    except sqlite3.Error as exc:
        raise internal_error("Failed to create user", exc)

    token = create_access_token(settings, user_id=user["id"], email=user["email"])
    log_request_activity(db, user["id"], "REGISTER", "New user registered", request)
    logger.info("New user registered: %s (ID: %s)", user["email"], user["id"])
    return AuthResponse(
        message="Registration completed successfully",
        token=token,
        user=UserPublic(id=user["id"], email=user["email"], name=user["name"]),
    )


@router.post("/login", response_model=AuthResponse, summary="Login")
def login(
    request: Request,
    body: Optional[LoginRequest] = None,
    db: AppDatabase = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    body = body or LoginRequest()
    if not body.email or not body.password:
        raise _missing_fields()

    try:
        user = get_active_user_by_email(db, body.email)
    except sqlite3.Error as exc:
        raise internal_error("Failed to check credentials", exc)

    if not user:
        log_request_activity(db, None, "LOGIN_FAILED", f"Email not found: {body.email}", request)
        raise _invalid_credentials()
    if not verify_password(body.password, user["password_hash"]):
        log_request_activity(db, user["id"], "LOGIN_FAILED", "Wrong password", request)
        raise _invalid_credentials()

    try:
        touch_last_login(db, user["id"])
    except sqlite3.Error as exc:
        raise internal_error("Failed to update last login", exc)

    token = create_access_token(settings, user_id=user["id"], email=user["email"])
    log_request_activity(db, user["id"], "LOGIN", "Login completed", request)
    logger.info("User logged in: %s (ID: %s)", user["email"], user["id"])
    return AuthResponse(
        message="Login completed",
        token=token,
        user=UserPublic(id=user["id"], email=user["email"], name=user.get("name")),
    )
