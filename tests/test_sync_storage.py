# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import sqlite3
import tempfile
import unittest
from pathlib import Path

from fitsync.app_db import AppDatabase
from fitsync.auth.storage import create_user
from fitsync.sync.storage import (
    DEFAULT_SETTINGS,
    DocumentKind,
    get_all,
    get_document,
    get_settings,
    list_documents,
    put_all,
    put_document,
    put_settings,
)


class TestSyncStorage(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="fitsync-test-"))
        self.db = AppDatabase(self._tmp / "fitness.db")
        self.db.init()
        self.user_id = create_user(self.db, email="anna@example.com", password_hash="x")["id"]

    def tearDown(self) -> None:
        shutil.rmtree(self._tmp, ignore_errors=True)

    def _count(self, table: str) -> int:
        with self.db.conn() as conn:
            return conn.execute(f"SELECT COUNT(*) FROM {table} WHERE user_id = ?", (self.user_id,)).fetchone()[0]

    def test_put_then_get_returns_same_payload(self) -> None:
        payload = {"days": {"1": {"kcal": 2100, "meals": ["oats", "rice"]}}, "note": "cut"}
        put_document(self.db, self.user_id, DocumentKind.NUTRITION, "2025-07", payload)

        self.assertEqual(get_document(self.db, self.user_id, DocumentKind.NUTRITION, "2025-07"), payload)
        self.assertIsNone(get_document(self.db, self.user_id, DocumentKind.WORKOUTS, "2025-07"))

    def test_second_write_replaces_first(self) -> None:
        first_id = put_document(self.db, self.user_id, DocumentKind.WORKOUTS, "2025-07", {"a": 1, "keep": True})
        second_id = put_document(self.db, self.user_id, DocumentKind.WORKOUTS, "2025-07", {"b": 2})

        self.assertEqual(first_id, second_id)
        self.assertEqual(self._count("workout_data"), 1)
        # Whole-document replacement, no merge.
        self.assertEqual(get_document(self.db, self.user_id, DocumentKind.WORKOUTS, "2025-07"), {"b": 2})

    def test_documents_are_listed_newest_month_first(self) -> None:
        for month in ("2025-05", "2025-07", "2025-06"):
            put_document(self.db, self.user_id, DocumentKind.NUTRITION, month, {"m": month})

        docs = list_documents(self.db, self.user_id, DocumentKind.NUTRITION)
        self.assertEqual(list(docs.keys()), ["2025-07", "2025-06", "2025-05"])

    def test_settings_default_when_absent(self) -> None:
        self.assertEqual(get_settings(self.db, self.user_id), {"height": 177, "targetBodyFat": 15, "currentBodyFat": 22})

        put_settings(self.db, self.user_id, {"height": 180})
        put_settings(self.db, self.user_id, {"height": 181})
        self.assertEqual(get_settings(self.db, self.user_id), {"height": 181})
        self.assertEqual(self._count("user_settings"), 1)

    def test_default_settings_are_not_shared(self) -> None:
        settings = get_settings(self.db, self.user_id)
        settings["height"] = 1
        self.assertEqual(DEFAULT_SETTINGS["height"], 177)

    def test_put_all_ignores_malformed_sections(self) -> None:
        put_document(self.db, self.user_id, DocumentKind.WORKOUTS, "2025-01", {"old": True})

        operations = put_all(
            self.db,
            self.user_id,
            {"nutrition": {"2025-07": {"x": 1}, "2025-08": {"x": 2}}, "workouts": "not-an-object", "settings": None},
        )

        self.assertEqual(operations, 2)
        data = get_all(self.db, self.user_id)
        self.assertEqual(data["nutrition"], {"2025-08": {"x": 2}, "2025-07": {"x": 1}})
        self.assertEqual(data["workouts"], {"2025-01": {"old": True}})
        self.assertEqual(data["settings"], DEFAULT_SETTINGS)

    def test_put_all_counts_settings_as_one_operation(self) -> None:
        operations = put_all(
            self.db,
            self.user_id,
            {"workouts": {"2025-07": []}, "settings": {"height": 170}},
        )
        self.assertEqual(operations, 2)
        self.assertEqual(get_settings(self.db, self.user_id), {"height": 170})
        self.assertEqual(get_document(self.db, self.user_id, DocumentKind.WORKOUTS, "2025-07"), [])

    def test_put_all_rolls_back_everything_on_failure(self) -> None:
        with self.db.conn() as conn:
            conn.execute(
                """
                CREATE TRIGGER fail_august BEFORE INSERT ON nutrition_data
                WHEN NEW.month_key = '2025-08'
                BEGIN
                    SELECT RAISE(ABORT, 'forced failure');
                END;
                """
            )

        with self.assertRaises(sqlite3.Error):
            put_all(
                self.db,
                self.user_id,
                {"settings": {"height": 150}, "nutrition": {"2025-07": {"x": 1}, "2025-08": {"x": 2}}},
            )

        self.assertIsNone(get_document(self.db, self.user_id, DocumentKind.NUTRITION, "2025-07"))
        self.assertEqual(self._count("nutrition_data"), 0)
        self.assertEqual(get_settings(self.db, self.user_id), DEFAULT_SETTINGS)

    def test_get_all_skips_corrupt_rows(self) -> None:
        put_document(self.db, self.user_id, DocumentKind.NUTRITION, "2025-06", {"ok": True})
        with self.db.conn() as conn:
            conn.execute(
                "INSERT INTO nutrition_data (user_id, month_key, data) VALUES (?, ?, ?)",
                (self.user_id, "2025-07", "{not json"),
            )
            conn.execute(
                "INSERT INTO user_settings (user_id, settings) VALUES (?, ?)",
                (self.user_id, "[broken"),
            )

        with self.assertLogs("fitsync.sync.storage", level="WARNING"):
            data = get_all(self.db, self.user_id)

        self.assertEqual(data["nutrition"], {"2025-06": {"ok": True}})
        self.assertEqual(data["settings"], DEFAULT_SETTINGS)

    def test_documents_are_scoped_per_user(self) -> None:
        other_id = create_user(self.db, email="ben@example.com", password_hash="x")["id"]
        put_document(self.db, self.user_id, DocumentKind.NUTRITION, "2025-07", {"owner": "anna"})
        put_document(self.db, other_id, DocumentKind.NUTRITION, "2025-07", {"owner": "ben"})

        self.assertEqual(get_document(self.db, self.user_id, DocumentKind.NUTRITION, "2025-07"), {"owner": "anna"})
        self.assertEqual(get_document(self.db, other_id, DocumentKind.NUTRITION, "2025-07"), {"owner": "ben"})


if __name__ == "__main__":
    unittest.main()
