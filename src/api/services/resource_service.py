# This file implements owner-scoped CRUD for resources.
# It exists so routers can stay transport-focused while SQL and row shaping live in one layer.
# Every statement carries `owner_id = :owner_id`, so a resource owned by someone else behaves exactly
# like one that does not exist. Updates are a single compare-and-swap on `version`.

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from src.api.api_config import ApiConfig
from src.api.db_access import DatabaseClient
from src.api.error_handlers import APIError, conflict, not_found, validation_error
from src.api.pagination import ListQuery
from src.api.query_composer import compose_list_query
from src.api.security import Principal

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 100
MAX_RESOURCE_TAGS = 10
RESOURCE_COLUMNS = "id, owner_id, title, body, completed, tags, version, created_at, updated_at"


def resource_columns(alias: str) -> str:
    return ", ".join(f"{alias}.{column.strip()}" for column in RESOURCE_COLUMNS.split(","))


def validate_title(title: str | None) -> str:
    if title is None or not title.strip():
        raise validation_error("Title is required")
    if len(title) > MAX_TITLE_LENGTH:
        raise validation_error(f"Title must be {MAX_TITLE_LENGTH} characters or less")
    return title


def normalize_tags(tags: Iterable[str] | None) -> list[str] | None:
    if tags is None:
        return None
    cleaned = list(dict.fromkeys(tag.strip() for tag in tags if tag and tag.strip()))
    if len(cleaned) > MAX_RESOURCE_TAGS:
        raise validation_error(f"At most {MAX_RESOURCE_TAGS} tags are allowed")
    return cleaned


class ResourceService:
    """Owner-scoped persistence for resources."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db
        self.resources_table = self.config.validate_table_name(self.config.resources_table_name)

    def create(
        self,
        principal: Principal,
        *,
        title: str,
        body: str = "",
        completed: bool = False,
        tags: Iterable[str] | None = None,
    ) -> dict[str, Any]:
        title = validate_title(title)
        query = f"""
        INSERT INTO {self.resources_table}
            (owner_id, title, body, completed, tags, version, created_at, updated_at)
        VALUES
            (:owner_id, :title, :body, :completed, CAST(:tags AS TEXT[]), 1, NOW(), NOW())
        RETURNING {RESOURCE_COLUMNS}
        """
        row = self.db.execute_returning(
            query,
            {
                "owner_id": principal.id,
                "title": title,
                "body": body or "",
                "completed": completed,
                "tags": normalize_tags(tags) or [],
            },
            operation="resources.create",
        )
        if row is None:
            raise APIError(
                status_code=500,
                error_code="INTERNAL_SERVER_ERROR",
                message="The server encountered a problem and could not process your request.",
            )
        logger.info("Created resource id=%s owner_id=%s", row["id"], principal.id)
        return self._shape(row)

    def get(self, principal: Principal, resource_id: int) -> dict[str, Any]:
        query = f"""
        SELECT {RESOURCE_COLUMNS}
        FROM {self.resources_table}
        WHERE id = :id AND owner_id = :owner_id
        LIMIT 1
        """
        row = self.db.fetch_one(
            query,
            {"id": resource_id, "owner_id": principal.id},
            operation="resources.get",
        )
        if row is None:
            raise not_found("Resource not found")
        return self._shape(row)

    def list(self, principal: Principal, list_query: ListQuery) -> list[dict[str, Any]]:
        composed = compose_list_query(
            list_query,
            alias="r",
            base_clauses=["r.owner_id = :owner_id"],
            base_params={"owner_id": principal.id},
        )
        query = f"""
        SELECT {resource_columns("r")}
        FROM {self.resources_table} r
        WHERE {composed.where_sql}
        ORDER BY {composed.order_sql}
        {composed.page_sql}
        """
        rows = self.db.fetch_all(query, composed.params, operation="resources.list")
        return [self._shape(row) for row in rows]

    def update(
        self,
        principal: Principal,
        resource_id: int,
        *,
        title: str,
        body: str,
        completed: bool,
        expected_version: int,
        tags: Iterable[str] | None = None,
    ) -> dict[str, Any]:
        title = validate_title(title)
        query = f"""
        UPDATE {self.resources_table}
        SET title = :title,
            body = :body,
            completed = :completed,
            tags = COALESCE(CAST(:tags AS TEXT[]), tags),
            version = version + 1,
            updated_at = NOW()
        WHERE id = :id AND owner_id = :owner_id AND version = :expected_version
        RETURNING {RESOURCE_COLUMNS}
        """
        row = self.db.execute_returning(
            query,
            {
                "title": title,
                "body": body or "",
                "completed": completed,
                "tags": normalize_tags(tags),
                "id": resource_id,
                "owner_id": principal.id,
                "expected_version": expected_version,
            },
            operation="resources.update",
        )
        if row is not None:
            return self._shape(row)

        current_version = self._current_version(principal, resource_id)
        if current_version is None:
            raise not_found("Resource not found")
        logger.info(
            "Version conflict on resource id=%s expected=%s current=%s",
            resource_id,
            expected_version,
            current_version,
        )
        raise conflict(
            "Resource was modified by another request; reload it and retry",
            error_code="VERSION_CONFLICT",
        )

    def toggle(self, principal: Principal, resource_id: int) -> dict[str, Any]:
        query = f"""
        UPDATE {self.resources_table}
        SET completed = NOT completed,
            version = version + 1,
            updated_at = NOW()
        WHERE id = :id AND owner_id = :owner_id
        RETURNING {RESOURCE_COLUMNS}
        """
        row = self.db.execute_returning(
            query,
            {"id": resource_id, "owner_id": principal.id},
            operation="resources.toggle",
        )
        if row is None:
            raise not_found("Resource not found")
        return self._shape(row)

    def delete(self, principal: Principal, resource_id: int) -> None:
        query = f"DELETE FROM {self.resources_table} WHERE id = :id AND owner_id = :owner_id"
        affected = self.db.execute(
            query,
            {"id": resource_id, "owner_id": principal.id},
            operation="resources.delete",
        )
        if affected == 0:
            raise not_found("Resource not found")

    def delete_all(self, principal: Principal) -> int:
        query = f"DELETE FROM {self.resources_table} WHERE owner_id = :owner_id"
        affected = self.db.execute(query, {"owner_id": principal.id}, operation="resources.delete_all")
        logger.info("Deleted %s resources owner_id=%s", affected, principal.id)
        return affected

    def _current_version(self, principal: Principal, resource_id: int) -> int | None:
        query = f"""
        SELECT version
        FROM {self.resources_table}
        WHERE id = :id AND owner_id = :owner_id
        LIMIT 1
        """
        row = self.db.fetch_one(
            query,
            {"id": resource_id, "owner_id": principal.id},
            operation="resources.current_version",
        )
        return int(row["version"]) if row is not None else None

    @staticmethod
    def _shape(row: dict[str, Any]) -> dict[str, Any]:
        shaped = dict(row)
        shaped["tags"] = list(shaped.get("tags") or [])
        shaped["body"] = shaped.get("body") or ""
        return shaped
