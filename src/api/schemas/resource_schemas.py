# This file defines resource request bodies, row models, and list envelopes.
# Title length rules are enforced by the resource service so they share one error path with storage checks.

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from src.api.schemas.common import EnvelopeFields, PaginationMetadata


class ResourceCreate(BaseModel):
    title: str
    body: str = ""
    completed: bool = False
    tags: list[str] | None = None


class ResourceUpdate(BaseModel):
    title: str
    body: str = ""
    completed: bool
    version: int = Field(ge=1, description="Version the client last read.")
    tags: list[str] | None = None


class ResourceRowV1(BaseModel):
    id: int
    owner_id: int
    title: str
    body: str
    completed: bool
    tags: list[str]
    version: int
    created_at: datetime
    updated_at: datetime


class ResourceResponseV1(EnvelopeFields):
    data: ResourceRowV1


class ResourceListResponseV1(EnvelopeFields):
    data: list[ResourceRowV1]
    pagination: PaginationMetadata


class CommentCreate(BaseModel):
    content: str


class CommentRowV1(BaseModel):
    id: int
    resource_id: int
    author_id: int
    content: str
    created_at: datetime


class CommentResponseV1(EnvelopeFields):
    data: CommentRowV1


class CommentItemV1(CommentRowV1):
    author_username: str


class CommentListResponseV1(EnvelopeFields):
    data: list[CommentItemV1]
    pagination: PaginationMetadata
