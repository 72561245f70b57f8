# -*- coding: utf-8 -*-

from __future__ import annotations

import shutil
import sqlite3
import tempfile
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

import jwt
from fastapi.testclient import TestClient

from fitsync.config import Settings
from fitsync.main import create_app


class _ExplodingDatabase:
    """Store double that fails the test on any storage access."""

    def init(self) -> None:
        pass

    def conn(self):
        raise AssertionError("storage accessed")

    def transaction(self):
        raise AssertionError("storage accessed")


class TestAuthApi(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = Path(tempfile.mkdtemp(prefix="fitsync-test-"))
        self.db_path = self._tmp / "fitness.db"
        self.settings = Settings(
            {
                "DATABASE_URL": str(self.db_path),
                "JWT_SECRET": "test-secret",
                "BCRYPT_ROUNDS": "4",
                "NODE_ENV": "test",
            }
        )
        self.client = TestClient(create_app(self.settings))

    def tearDown(self) -> None:
        self.client.close()
        shutil.rmtree(self._tmp, ignore_errors=True)

    def _register(self, email: str = "anna@example.com", password: str = "secret1", **extra):
        return self.client.post("/api/auth/register", json={"email": email, "password": password, **extra})

    def _password_hash(self, email: str) -> str:
        conn = sqlite3.connect(self.db_path)
        try:
            return conn.execute("SELECT password_hash FROM users WHERE email = ?", (email,)).fetchone()[0]
        finally:
            conn.close()

    def test_register_returns_token_and_user(self) -> None:
        resp = self._register(name="Anna")
        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertEqual(body["user"]["email"], "anna@example.com")
        self.assertEqual(body["user"]["name"], "Anna")

        claims = jwt.decode(body["token"], "test-secret", algorithms=["HS256"])
        self.assertEqual(claims["userId"], body["user"]["id"])
        self.assertEqual(claims["email"], "anna@example.com")
        self.assertAlmostEqual(claims["exp"] - claims["iat"], 30 * 24 * 3600, delta=5)

    def test_register_validation_codes(self) -> None:
        resp = self.client.post("/api/auth/register", json={"email": "anna@example.com"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "MISSING_FIELDS")

        for path in ("/api/auth/register", "/api/auth/login"):
            resp = self.client.post(path)
            self.assertEqual(resp.status_code, 400, path)
            self.assertEqual(resp.json()["code"], "MISSING_FIELDS", path)

        resp = self._register(password="12345")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "PASSWORD_TOO_SHORT")

    def test_duplicate_email_keeps_existing_hash(self) -> None:
        self.assertEqual(self._register().status_code, 201)
        original_hash = self._password_hash("anna@example.com")

        resp = self._register(password="another-password")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "EMAIL_EXISTS")
        self.assertEqual(self._password_hash("anna@example.com"), original_hash)

        resp = self.client.post("/api/auth/login", json={"email": "anna@example.com", "password": "secret1"})
        self.assertEqual(resp.status_code, 200)

    def test_login_rejects_bad_credentials(self) -> None:
        self._register()

        resp = self.client.post("/api/auth/login", json={"email": "anna@example.com", "password": "wrong-one"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "INVALID_CREDENTIALS")

        resp = self.client.post("/api/auth/login", json={"email": "nobody@example.com", "password": "secret1"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "INVALID_CREDENTIALS")

        resp = self.client.post("/api/auth/login", json={"email": "anna@example.com"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "MISSING_FIELDS")

    def test_login_rejects_inactive_user(self) -> None:
        self._register()
        conn = sqlite3.connect(self.db_path)
        conn.execute("UPDATE users SET is_active = 0 WHERE email = ?", ("anna@example.com",))
        conn.commit()
        conn.close()

        resp = self.client.post("/api/auth/login", json={"email": "anna@example.com", "password": "secret1"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "INVALID_CREDENTIALS")

    def test_login_records_activity(self) -> None:
        token = self._register().json()["token"]
        resp = self.client.post("/api/auth/login", json={"email": "anna@example.com", "password": "secret1"})
        self.assertEqual(resp.status_code, 200)
        self.assertIn("token", resp.json())

        logs = self.client.get("/api/logs", headers={"Authorization": f"Bearer {token}"}).json()["logs"]
        self.assertEqual([entry["action"] for entry in logs], ["LOGIN", "REGISTER"])

    def test_missing_token_is_rejected_before_storage(self) -> None:
        app = create_app(self.settings, db=_ExplodingDatabase())  # type: ignore[arg-type]
        # No context manager: the lifespan hook would touch storage.
        client = TestClient(app)
        try:
            for method, path in (
                ("get", "/api/sync"),
                ("post", "/api/sync"),
                ("get", "/api/nutrition"),
                ("post", "/api/workouts/2025-07"),
                ("get", "/api/settings"),
                ("get", "/api/admin/stats"),
                ("get", "/api/logs"),
            ):
                resp = getattr(client, method)(path)
                self.assertEqual(resp.status_code, 401, path)
                self.assertEqual(resp.json()["code"], "NO_TOKEN", path)
        finally:
            client.close()

    def test_invalid_and_expired_tokens_are_rejected(self) -> None:
        user_id = self._register().json()["user"]["id"]

        forged = jwt.encode({"userId": user_id, "email": "anna@example.com"}, "other-secret", algorithm="HS256")
        expired = jwt.encode(
            {
                "userId": user_id,
                "email": "anna@example.com",
                "exp": datetime.now(timezone.utc) - timedelta(minutes=1),
            },
            "test-secret",
            algorithm="HS256",
        )
        for token in (forged, expired, "not-a-token"):
            resp = self.client.get("/api/sync", headers={"Authorization": f"Bearer {token}"})
            self.assertEqual(resp.status_code, 403)
            self.assertEqual(resp.json()["code"], "INVALID_TOKEN")


if __name__ == "__main__":
    unittest.main()
