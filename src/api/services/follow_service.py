# This file maintains the follow graph that feeds the activity feed.
# Each edge is unique per (follower, followee) pair and self-follows are rejected before any SQL runs.

from __future__ import annotations

import logging

from src.api.api_config import ApiConfig
from src.api.db_access import DatabaseClient, UniqueViolationError
from src.api.error_handlers import conflict, not_found, validation_error
from src.api.security import Principal

logger = logging.getLogger(__name__)


class FollowService:
    """Follow and unfollow other users."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db
        self.users_table = self.config.validate_table_name(self.config.users_table_name)
        self.follows_table = self.config.validate_table_name(self.config.follows_table_name)

    def follow(self, principal: Principal, followee_id: int) -> None:
        if followee_id == principal.id:
            raise validation_error("You cannot follow yourself")

        # the SELECT yields no row for an unknown followee, so nothing is inserted
        query = f"""
        INSERT INTO {self.follows_table} (follower_id, followee_id, created_at)
        SELECT :follower_id, u.id, NOW()
        FROM {self.users_table} u
        WHERE u.id = :followee_id
        RETURNING follower_id, followee_id
        """
        try:
            row = self.db.execute_returning(
                query,
                {"follower_id": principal.id, "followee_id": followee_id},
                operation="follows.follow",
            )
        except UniqueViolationError as exc:
            raise conflict("You already follow this user") from exc

        if row is None:
            raise not_found("User not found")
        logger.info("User id=%s followed id=%s", principal.id, followee_id)

    def unfollow(self, principal: Principal, followee_id: int) -> None:
        query = f"""
        DELETE FROM {self.follows_table}
        WHERE follower_id = :follower_id AND followee_id = :followee_id
        """
        self.db.execute(
            query,
            {"follower_id": principal.id, "followee_id": followee_id},
            operation="follows.unfollow",
        )
