# This file defines request and response schemas for signup, login, and the current user.
# Digests never appear in any response model.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from src.api.schemas.common import EnvelopeFields


class CredentialsIn(BaseModel):
    username: str
    password: str


class UserOut(BaseModel):
    id: int
    username: str
    created_at: datetime | None = None


class UserResponse(EnvelopeFields):
    data: UserOut


class TokenOut(BaseModel):
    token: str
    token_type: str = "bearer"
    expires_in: int


class TokenResponse(EnvelopeFields):
    data: TokenOut
