# -*- coding: utf-8 -*-
"""Admin — aggregate counters."""

from __future__ import annotations

from typing import Dict

from ..app_db import AppDatabase


def get_stats(db: AppDatabase) -> Dict[str, int]:
    with db.conn() as conn:
        row = conn.execute(
            """
            SELECT
                (SELECT COUNT(*) FROM users WHERE is_active = 1) AS total_users,
                (SELECT COUNT(*) FROM activity_logs WHERE DATE(timestamp) = DATE('now')) AS today_activity,
                (SELECT COUNT(*) FROM nutrition_data) AS nutrition_months,
                (SELECT COUNT(*) FROM workout_data) AS workout_months
            """
        ).fetchone()
        return {key: int(row[key]) for key in row.keys()}
