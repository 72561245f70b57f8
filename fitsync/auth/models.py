# -*- coding: utf-8 -*-
"""Auth — Pydantic models."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

MIN_PASSWORD_LENGTH = 6


class RegisterRequest(BaseModel):
    # Presence and length are checked in the route so the client gets a stable error code.
    email: Optional[str] = Field(default=None, max_length=254)
    password: Optional[str] = Field(default=None, max_length=128)
    name: Optional[str] = Field(default=None, max_length=128)


class LoginRequest(BaseModel):
    email: Optional[str] = Field(default=None, max_length=254)
    password: Optional[str] = Field(default=None, max_length=128)


class UserPublic(BaseModel):
    id: int
    email: str
    name: Optional[str] = None


class AuthResponse(BaseModel):
    message: str
    token: str
    user: UserPublic
