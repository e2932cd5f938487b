# This file builds the activity feed: resources written by the principal or by anyone they follow.
# Rows are denormalized with the author's username and a comment count so clients need no follow-up calls.
# Filters, ordering, and paging come from the shared query composer, so the feed follows the same
# limit/offset/sort contract as the resource list.

from __future__ import annotations

from typing import Any

from src.api.api_config import ApiConfig
from src.api.db_access import DatabaseClient
from src.api.pagination import ListQuery
from src.api.query_composer import compose_list_query
from src.api.security import Principal
from src.api.services.resource_service import resource_columns


class FeedService:
    """Read-only feed aggregation over resources, follows, users, and comments."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db
        self.resources_table = self.config.validate_table_name(self.config.resources_table_name)
        self.users_table = self.config.validate_table_name(self.config.users_table_name)
        self.follows_table = self.config.validate_table_name(self.config.follows_table_name)
        self.comments_table = self.config.validate_table_name(self.config.comments_table_name)

    def visibility_clause(self, *, alias: str) -> str:
        """SQL predicate that is true for resources the principal may see in their feed."""

        return (
            f"({alias}.owner_id = :principal_id OR EXISTS ("
            f"SELECT 1 FROM {self.follows_table} f "
            f"WHERE f.follower_id = :principal_id AND f.followee_id = {alias}.owner_id))"
        )

    def get_feed(self, principal: Principal, list_query: ListQuery) -> list[dict[str, Any]]:
        composed = compose_list_query(
            list_query,
            alias="p",
            base_clauses=[self.visibility_clause(alias="p")],
            base_params={"principal_id": principal.id},
            include_completed=False,
        )

        query = f"""
        SELECT
            {resource_columns("p")},
            u.username AS author_username,
            COALESCE(cc.comment_count, 0) AS comment_count
        FROM {self.resources_table} p
        JOIN {self.users_table} u ON u.id = p.owner_id
        LEFT JOIN (
            SELECT c.resource_id, COUNT(*) AS comment_count
            FROM {self.comments_table} c
            GROUP BY c.resource_id
        ) cc ON cc.resource_id = p.id
        WHERE {composed.where_sql}
        ORDER BY {composed.order_sql}
        {composed.page_sql}
        """
        rows = self.db.fetch_all(query, composed.params, operation="feed.get")

        feed: list[dict[str, Any]] = []
        for row in rows:
            shaped = dict(row)
            shaped["tags"] = list(shaped.get("tags") or [])
            shaped["body"] = shaped.get("body") or ""
            shaped["comment_count"] = int(shaped.get("comment_count") or 0)
            feed.append(shaped)
        return feed
