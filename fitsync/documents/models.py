# -*- coding: utf-8 -*-
"""Documents — Pydantic models."""

from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel


def is_missing(value: Any) -> bool:
    """Objects and arrays always count as present, even when empty."""
    if isinstance(value, (dict, list)):
        return False
    return not value


class DocumentWriteRequest(BaseModel):
    data: Any = None


class SettingsWriteRequest(BaseModel):
    settings: Any = None


class DocumentSaved(BaseModel):
    message: str
    monthKey: str
    rowId: int


class DocumentResponse(BaseModel):
    monthKey: str
    data: Any


class NutritionListResponse(BaseModel):
    nutrition: Dict[str, Any]


class WorkoutListResponse(BaseModel):
    workouts: Dict[str, Any]


class SettingsResponse(BaseModel):
    settings: Any


class SettingsSaved(BaseModel):
    message: str
    rowId: int
