# This file stores and reads comments on resources visible in the author's feed.
# Comment rows are what the feed's per-resource comment count aggregates.
# Reads and writes share the feed's visibility predicate, so a hidden resource has no readable comments.

from __future__ import annotations

from typing import Any

from src.api.api_config import ApiConfig
from src.api.db_access import DatabaseClient
from src.api.error_handlers import not_found, validation_error
from src.api.pagination import ListQuery
from src.api.security import Principal
from src.api.services.feed_service import FeedService

MAX_COMMENT_LENGTH = 100


class CommentService:
    """Create and list comments on visible resources."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient, feed: FeedService) -> None:
        self.config = config
        self.db = db
        self.feed = feed
        self.resources_table = self.config.validate_table_name(self.config.resources_table_name)
        self.comments_table = self.config.validate_table_name(self.config.comments_table_name)
        self.users_table = self.config.validate_table_name(self.config.users_table_name)

    def add_comment(self, principal: Principal, resource_id: int, *, content: str) -> dict[str, Any]:
        if not content or not content.strip():
            raise validation_error("Content is required")
        if len(content) > MAX_COMMENT_LENGTH:
            raise validation_error(f"Content must be {MAX_COMMENT_LENGTH} characters or less")

        query = f"""
        INSERT INTO {self.comments_table} (resource_id, author_id, content, created_at)
        SELECT p.id, :principal_id, :content, NOW()
        FROM {self.resources_table} p
        WHERE p.id = :resource_id AND {self.feed.visibility_clause(alias="p")}
        RETURNING id, resource_id, author_id, content, created_at
        """
        row = self.db.execute_returning(
            query,
            {"principal_id": principal.id, "resource_id": resource_id, "content": content},
            operation="comments.create",
        )
        if row is None:
            raise not_found("Resource not found")
        return row

    def list_for_resource(
        self, principal: Principal, resource_id: int, list_query: ListQuery
    ) -> list[dict[str, Any]]:
        """Return one page of a visible resource's comments ordered by `created_at`."""

        visible = self.db.fetch_one(
            f"""
            SELECT p.id
            FROM {self.resources_table} p
            WHERE p.id = :resource_id AND {self.feed.visibility_clause(alias="p")}
            LIMIT 1
            """,
            {"principal_id": principal.id, "resource_id": resource_id},
            operation="comments.resource_visible",
        )
        if visible is None:
            raise not_found("Resource not found")

        direction = "DESC" if list_query.sort.order == "desc" else "ASC"
        query = f"""
        SELECT c.id, c.resource_id, c.author_id, c.content, c.created_at,
               u.username AS author_username
        FROM {self.comments_table} c
        JOIN {self.users_table} u ON u.id = c.author_id
        WHERE c.resource_id = :resource_id
        ORDER BY c.created_at {direction}, c.id {direction}
        LIMIT :limit OFFSET :offset
        """
        return self.db.fetch_all(
            query,
            {"resource_id": resource_id, "limit": list_query.limit, "offset": list_query.offset},
            operation="comments.list",
        )
