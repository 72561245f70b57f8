# -*- coding: utf-8 -*-
"""FastAPI dependencies for the shared store handle and settings."""

from __future__ import annotations

from fastapi import Request

from .app_db import AppDatabase
from .config import Settings


def get_db(request: Request) -> AppDatabase:
    return request.app.state.db


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
