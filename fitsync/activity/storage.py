# -*- coding: utf-8 -*-
"""Activity log — append-only audit trail."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import Request

from ..app_db import AppDatabase, utc_now

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 100


def log_activity(
    db: AppDatabase,
    user_id: Optional[int],
    action: str,
    details: Optional[str] = None,
    *,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> None:
    # Fire-and-forget: an audit failure must never fail the data operation.
    try:
        with db.conn() as conn:
            conn.execute(
                """
                INSERT INTO activity_logs (user_id, action, details, ip_address, user_agent, timestamp)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (user_id, action, details, ip_address, user_agent, utc_now()),
            )
    except Exception as exc:
        logger.warning("Failed to record activity %s for user %s: %s", action, user_id, exc)


def log_request_activity(
    db: AppDatabase,
    user_id: Optional[int],
    action: str,
    details: Optional[str],
    request: Request,
) -> None:
    ip_address = request.client.host if request.client else None
    log_activity(
        db,
        user_id,
        action,
        details,
        ip_address=ip_address,
        user_agent=request.headers.get("user-agent"),
    )


def clamp_limit(raw: Any) -> int:
    try:
        limit = int(raw)
    except (TypeError, ValueError):
        return DEFAULT_LIMIT
    if limit <= 0:
        return DEFAULT_LIMIT
    return min(limit, MAX_LIMIT)


def recent_activity(db: AppDatabase, user_id: int, limit: int = DEFAULT_LIMIT) -> List[Dict[str, Any]]:
    """Newest entries first; `limit` is expected to be clamped already."""
    with db.conn() as conn:
        rows = conn.execute(
            """
            SELECT action, details, timestamp
            FROM activity_logs
            WHERE user_id = ?
            ORDER BY timestamp DESC, id DESC
            LIMIT ?
            """,
            (user_id, limit),
        ).fetchall()
        return [dict(r) for r in rows]
