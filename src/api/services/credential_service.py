# This file implements signup, login, and user lookup against the users table.
# It exists so routers never touch password digests or credential SQL directly.
# Login failures are deliberately uniform: an unknown username and a wrong password produce
# the same error, and both paths spend one digest verification.

from __future__ import annotations

import logging
from typing import Any

from src.api.api_config import ApiConfig
from src.api.db_access import DatabaseClient, UniqueViolationError
from src.api.error_handlers import APIError, conflict, not_found, unauthorized, validation_error
from src.api.security import Principal, hash_password, verify_password

logger = logging.getLogger(__name__)

MAX_USERNAME_LENGTH = 64
INVALID_CREDENTIALS_MESSAGE = "invalid username or password"


class CredentialService:
    """Register and authenticate users."""

    def __init__(self, *, config: ApiConfig, db: DatabaseClient) -> None:
        self.config = config
        self.db = db
        self.users_table = self.config.validate_table_name(self.config.users_table_name)
        self._iterations = config.pbkdf2_iterations
        # verified against for unknown usernames so both failure paths cost the same
        self._dummy_digest = hash_password("not-a-real-password", iterations=self._iterations)

    def register(self, *, username: str, password: str) -> dict[str, Any]:
        username = username.strip()
        if not username or not password:
            raise validation_error("Username and password are required")
        if len(username) > MAX_USERNAME_LENGTH:
            raise validation_error(f"Username must be {MAX_USERNAME_LENGTH} characters or less")

        query = f"""
        INSERT INTO {self.users_table} (username, password_hash, created_at)
        VALUES (:username, :password_hash, NOW())
        RETURNING id, username, created_at
        """
        try:
            row = self.db.execute_returning(
                query,
                {"username": username, "password_hash": hash_password(password, iterations=self._iterations)},
                operation="credentials.register",
            )
        except UniqueViolationError as exc:
            raise conflict("Username already taken") from exc

        if row is None:
            raise APIError(
                status_code=500,
                error_code="INTERNAL_SERVER_ERROR",
                message="The server encountered a problem and could not process your request.",
            )
        logger.info("Registered user id=%s", row["id"])
        return row

    def authenticate(self, *, username: str, password: str) -> Principal:
        username = username.strip()
        if not username or not password:
            raise validation_error("Username and password are required")

        query = f"""
        SELECT id, username, password_hash
        FROM {self.users_table}
        WHERE username = :username
        LIMIT 1
        """
        row = self.db.fetch_one(query, {"username": username}, operation="credentials.authenticate")

        if row is None:
            verify_password(password, self._dummy_digest)
            logger.info("Login rejected")
            raise unauthorized(INVALID_CREDENTIALS_MESSAGE)
        if not verify_password(password, str(row["password_hash"])):
            logger.info("Login rejected")
            raise unauthorized(INVALID_CREDENTIALS_MESSAGE)

        return Principal(id=int(row["id"]), username=str(row["username"]))

    def get_user(self, user_id: int) -> dict[str, Any]:
        query = f"""
        SELECT id, username, created_at
        FROM {self.users_table}
        WHERE id = :id
        LIMIT 1
        """
        row = self.db.fetch_one(query, {"id": user_id}, operation="credentials.get_user")
        if row is None:
            raise not_found("User not found")
        return row
