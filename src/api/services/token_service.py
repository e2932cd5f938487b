# This file issues and verifies signed, time-limited bearer tokens.
# Tokens are stateless JWTs carrying the principal id (`sub`) and username; there is no server-side record.
# Verification pins the configured HMAC algorithm so tokens signed any other way are rejected,
# including `none` and asymmetric algorithm substitution.

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from src.api.api_config import ApiConfig
from src.api.error_handlers import unauthorized
from src.api.security import Principal

logger = logging.getLogger(__name__)

_SUBJECT_RE = re.compile(r"^[1-9][0-9]{0,18}$")


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


class TokenService:
    """Issue and verify bearer tokens with a process-wide secret."""

    def __init__(
        self,
        *,
        secret: str,
        algorithm: str = "HS256",
        ttl_seconds: int = 86400,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if not secret:
            raise RuntimeError("Token signing secret is not configured.")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl_seconds = ttl_seconds
        self._clock = clock

    @classmethod
    def from_config(cls, config: ApiConfig) -> TokenService:
        return cls(
            secret=config.jwt_secret,
            algorithm=config.jwt_algorithm,
            ttl_seconds=config.token_ttl_seconds,
        )

    def issue(self, principal: Principal) -> str:
        issued_at = self._clock()
        payload: dict[str, Any] = {
            "sub": str(principal.id),
            "username": principal.username,
            "iat": issued_at,
            "exp": issued_at + timedelta(seconds=self.ttl_seconds),
        }
        return jwt.encode(payload, self._secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Principal:
        try:
            header = jwt.get_unverified_header(token)
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected malformed token: %s", exc)
            raise unauthorized("Unauthorized - invalid token") from exc

        if header.get("alg") != self.algorithm:
            logger.debug("Rejected token signed with alg=%s", header.get("alg"))
            raise unauthorized("Unauthorized - invalid token")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat", "sub"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise unauthorized("Unauthorized - token expired") from exc
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected token: %s", exc)
            raise unauthorized("Unauthorized - invalid token") from exc

        subject = claims.get("sub")
        if not isinstance(subject, str) or not _SUBJECT_RE.match(subject):
            raise unauthorized("Unauthorized - invalid user ID")
        username = claims.get("username")
        if not isinstance(username, str) or not username:
            raise unauthorized("Unauthorized - invalid claims")

        return Principal(id=int(subject), username=username)
