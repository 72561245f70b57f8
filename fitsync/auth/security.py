# -*- coding: utf-8 -*-
"""Auth — password hashing + JWT + FastAPI helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt
from fastapi import Depends, Request

from ..config import Settings
from ..deps import get_settings
from ..errors import ApiError

JWT_ALGORITHM = "HS256"


def hash_password(password: str, rounds: int = 12) -> str:
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except (TypeError, ValueError):
        return False


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(settings: Settings, *, user_id: int, email: str) -> str:
    now = _utc_now()
    payload = {
        "userId": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(days=int(settings.token_ttl_days)),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=JWT_ALGORITHM)


def decode_token(settings: Settings, token: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise ApiError(403, "Invalid or expired token", "INVALID_TOKEN", details="token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise ApiError(403, "Invalid or expired token", "INVALID_TOKEN", details=str(exc)) from exc
    if not isinstance(payload.get("userId"), int):
        raise ApiError(403, "Invalid or expired token", "INVALID_TOKEN", details="missing userId claim")
    return payload


def get_token_from_request(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization") or ""
    parts = auth.split(" ", 1)
    if len(parts) == 2 and parts[0].lower() == "bearer":
        return parts[1].strip() or None
    return None


def get_current_user(request: Request, settings: Settings = Depends(get_settings)) -> Dict[str, Any]:
    """Resolve the caller from the bearer token; no database lookup."""
    token = get_token_from_request(request)
    if not token:
        raise ApiError(401, "Access token required", "NO_TOKEN")

    payload = decode_token(settings, token)
    return {"userId": payload["userId"], "email": payload.get("email")}
