from __future__ import annotations

import os
from pathlib import Path
from typing import List, Mapping, Optional

DEFAULT_JWT_SECRET = "your-secret-key-change-in-production"


def _database_path(raw: str) -> Path:
    # Accept both a bare path and a SQLAlchemy-style URL.
    for prefix in ("sqlite:///", "sqlite://", "file:"):
        if raw.startswith(prefix):
            raw = raw[len(prefix):]
            break
    return Path(raw).expanduser()


class Settings:
    """Centralized configuration for the sync backend."""

    def __init__(self, environ: Optional[Mapping[str, str]] = None) -> None:
        env = os.environ if environ is None else environ

        self.host: str = env.get("HOST") or "0.0.0.0"
        self.port: int = int(env.get("PORT") or "3000")
        self.environment: str = (env.get("APP_ENV") or env.get("NODE_ENV") or "development").strip().lower()
        self.log_level: str = (env.get("LOG_LEVEL") or "INFO").upper()
        self.db_path: Path = _database_path(env.get("DATABASE_URL") or "./fitness.db")

        # In production you MUST set JWT_SECRET. The fallback keeps local demos easy.
        self.jwt_secret: str = env.get("JWT_SECRET") or DEFAULT_JWT_SECRET
        self.token_ttl_days: int = int(env.get("TOKEN_TTL_DAYS") or "30")
        self.bcrypt_rounds: int = int(env.get("BCRYPT_ROUNDS") or "12")
        self.max_body_mb: int = int(env.get("MAX_BODY_MB") or "10")
        self.version: str = "1.0.0"

        cors = env.get("CORS_ORIGIN", "*")
        if cors.strip() == "*":
            self.cors_origins: List[str] = ["*"]
        else:
            self.cors_origins = [
                origin.strip() for origin in cors.split(",") if origin.strip()
            ]

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def uses_default_secret(self) -> bool:
        return self.jwt_secret == DEFAULT_JWT_SECRET
