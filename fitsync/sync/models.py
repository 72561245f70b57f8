# -*- coding: utf-8 -*-
"""Sync domain — Pydantic models."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class SyncUser(BaseModel):
    id: int
    email: Optional[str] = None


class SyncSnapshot(BaseModel):
    nutrition: Dict[str, Any] = Field(default_factory=dict)
    workouts: Dict[str, Any] = Field(default_factory=dict)
    settings: Any
    lastSync: str
    user: SyncUser


class SyncSaveRequest(BaseModel):
    # Sections stay untyped: non-object sections are ignored by the store, not rejected.
    nutrition: Any = None
    workouts: Any = None
    settings: Any = None


class SyncSaveResponse(BaseModel):
    message: str
    operations: int
    timestamp: str
