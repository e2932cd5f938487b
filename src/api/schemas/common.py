# This file defines shared schema pieces reused by multiple API endpoints.
# It exists so envelope fields, pagination blocks, and error payloads stay consistent.
# Shared models reduce duplication and keep contract changes easier to review.

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field


class PaginationMetadata(BaseModel):
    limit: int = Field(ge=1)
    offset: int = Field(ge=0)
    count: int = Field(ge=0)
    sort: str
    order: Literal["asc", "desc"]


class EnvelopeFields(BaseModel):
    status: Literal["success"] = "success"
    request_id: str


class ErrorDetail(BaseModel):
    message: str
    code: str | None = None
    details: Any | None = None


class ErrorResponse(BaseModel):
    status: Literal["error"] = "error"
    error: ErrorDetail
    request_id: str
