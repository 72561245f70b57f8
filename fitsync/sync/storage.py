# -*- coding: utf-8 -*-
"""Sync & resource store (SQLite).

Documents are opaque JSON payloads keyed by (user, kind, month-key), plus one settings
document per user. Every write is an upsert that replaces the whole payload; there is no
merge and no version check, so the last committed write wins.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from enum import Enum
from typing import Any, Dict, Optional

from ..app_db import AppDatabase, utc_now

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Any] = {
    "height": 177,
    "targetBodyFat": 15,
    "currentBodyFat": 22,
}


class DocumentKind(str, Enum):
    NUTRITION = "nutrition"
    WORKOUTS = "workouts"

    @property
    def table(self) -> str:
        return _TABLES[self]


_TABLES = {
    DocumentKind.NUTRITION: "nutrition_data",
    DocumentKind.WORKOUTS: "workout_data",
}


def default_settings() -> Dict[str, Any]:
    return dict(DEFAULT_SETTINGS)


def _dumps(payload: Any) -> str:
    return json.dumps(payload, ensure_ascii=False)


def _upsert_document(conn: sqlite3.Connection, user_id: int, kind: DocumentKind, month_key: str, payload: Any) -> int:
    conn.execute(
        f"""
        INSERT INTO {kind.table} (user_id, month_key, data, created_at, updated_at)
        VALUES (?, ?, ?, ?, ?)
        ON CONFLICT(user_id, month_key) DO UPDATE SET
            data = excluded.data,
            updated_at = excluded.updated_at
        """,
        (user_id, month_key, _dumps(payload), utc_now(), utc_now()),
    )
    row = conn.execute(
        f"SELECT id FROM {kind.table} WHERE user_id = ? AND month_key = ?",
        (user_id, month_key),
    ).fetchone()
    return int(row["id"])


def _upsert_settings(conn: sqlite3.Connection, user_id: int, payload: Any) -> int:
    conn.execute(
        """
        INSERT INTO user_settings (user_id, settings, updated_at)
        VALUES (?, ?, ?)
        ON CONFLICT(user_id) DO UPDATE SET
            settings = excluded.settings,
            updated_at = excluded.updated_at
        """,
        (user_id, _dumps(payload), utc_now()),
    )
    row = conn.execute("SELECT id FROM user_settings WHERE user_id = ?", (user_id,)).fetchone()
    return int(row["id"])


def _read_documents(conn: sqlite3.Connection, user_id: int, kind: DocumentKind) -> Dict[str, Any]:
    rows = conn.execute(
        f"SELECT month_key, data FROM {kind.table} WHERE user_id = ? ORDER BY month_key DESC",
        (user_id,),
    ).fetchall()
    documents: Dict[str, Any] = {}
    for row in rows:
        try:
            documents[row["month_key"]] = json.loads(row["data"])
        except (TypeError, ValueError) as exc:
            logger.warning("JSON parse error for %s %s (user %s): %s", kind.value, row["month_key"], user_id, exc)
    return documents


def _read_settings(conn: sqlite3.Connection, user_id: int) -> Dict[str, Any]:
    row = conn.execute("SELECT settings FROM user_settings WHERE user_id = ?", (user_id,)).fetchone()
    if not row:
        return default_settings()
    try:
        return json.loads(row["settings"])
    except (TypeError, ValueError) as exc:
        logger.warning("JSON parse error for settings (user %s): %s", user_id, exc)
        return default_settings()


# ---- per-kind operations ----


def list_documents(db: AppDatabase, user_id: int, kind: DocumentKind) -> Dict[str, Any]:
    with db.conn() as conn:
        return _read_documents(conn, user_id, kind)


def get_document(db: AppDatabase, user_id: int, kind: DocumentKind, month_key: str) -> Optional[Any]:
    with db.conn() as conn:
        row = conn.execute(
            f"SELECT data FROM {kind.table} WHERE user_id = ? AND month_key = ?",
            (user_id, month_key),
        ).fetchone()
    if not row:
        return None
    try:
        return json.loads(row["data"])
    except (TypeError, ValueError) as exc:
        logger.warning("JSON parse error for %s %s (user %s): %s", kind.value, month_key, user_id, exc)
        return None


def put_document(db: AppDatabase, user_id: int, kind: DocumentKind, month_key: str, payload: Any) -> int:
    with db.transaction() as conn:
        return _upsert_document(conn, user_id, kind, month_key, payload)


def get_settings(db: AppDatabase, user_id: int) -> Dict[str, Any]:
    with db.conn() as conn:
        return _read_settings(conn, user_id)


def put_settings(db: AppDatabase, user_id: int, payload: Any) -> int:
    with db.transaction() as conn:
        return _upsert_settings(conn, user_id, payload)


# ---- bulk sync ----


def get_all(db: AppDatabase, user_id: int) -> Dict[str, Any]:
    with db.conn() as conn:
        return {
            "nutrition": _read_documents(conn, user_id, DocumentKind.NUTRITION),
            "workouts": _read_documents(conn, user_id, DocumentKind.WORKOUTS),
            "settings": _read_settings(conn, user_id),
        }


def put_all(db: AppDatabase, user_id: int, payload: Dict[str, Any]) -> int:
    """Upsert every present section in one transaction and return the operation count.

    Sections that are missing or not JSON objects are left untouched; arrays are ignored
    too rather than stored under their indexes. Any failure rolls back the whole call.
    """
    operations = 0
    with db.transaction() as conn:
        for kind in DocumentKind:
            section = payload.get(kind.value)
            if not isinstance(section, dict):
                continue
            for month_key, document in section.items():
                _upsert_document(conn, user_id, kind, str(month_key), document)
                operations += 1

        settings = payload.get("settings")
        if isinstance(settings, dict):
            _upsert_settings(conn, user_id, settings)
            operations += 1
    return operations
