# -*- coding: utf-8 -*-
"""Auth — DB storage helpers."""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..app_db import AppDatabase, utc_now


def get_user_by_email(db: AppDatabase, email: str) -> Optional[Dict[str, Any]]:
    with db.conn() as conn:
        row = conn.execute("SELECT * FROM users WHERE email = ?", (email,)).fetchone()
        return dict(row) if row else None


def get_active_user_by_email(db: AppDatabase, email: str) -> Optional[Dict[str, Any]]:
    with db.conn() as conn:
        row = conn.execute("SELECT * FROM users WHERE email = ? AND is_active = 1", (email,)).fetchone()
        return dict(row) if row else None


def create_user(db: AppDatabase, *, email: str, password_hash: str, name: str = "") -> Dict[str, Any]:
    """Insert a user; raises sqlite3.IntegrityError when the email is taken."""
    now = utc_now()
    with db.conn() as conn:
        cur = conn.execute(
            "INSERT INTO users (email, password_hash, name, created_at, last_login) VALUES (?, ?, ?, ?, ?)",
            (email, password_hash, name, now, now),
        )
        user_id = cur.lastrowid
    return {"id": user_id, "email": email, "name": name, "created_at": now}


def touch_last_login(db: AppDatabase, user_id: int) -> None:
    with db.conn() as conn:
        conn.execute("UPDATE users SET last_login = ? WHERE id = ?", (utc_now(), user_id))


def count_users(db: AppDatabase, *, active_only: bool = False) -> int:
    sql = "SELECT COUNT(*) FROM users"
    if active_only:
        sql += " WHERE is_active = 1"
    with db.conn() as conn:
        return int(conn.execute(sql).fetchone()[0])
