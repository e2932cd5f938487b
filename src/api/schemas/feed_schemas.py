# This file defines the denormalized feed row and its list envelope.

from __future__ import annotations

from src.api.schemas.common import EnvelopeFields, PaginationMetadata
from src.api.schemas.resource_schemas import ResourceRowV1


class FeedItemV1(ResourceRowV1):
    author_username: str
    comment_count: int


class FeedResponseV1(EnvelopeFields):
    data: list[FeedItemV1]
    pagination: PaginationMetadata
