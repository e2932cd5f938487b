# This file provides dependency factories for FastAPI routes.
# It exists so the database client and services are created once and shared through dependency injection.
# It also holds the bearer-token gate: routes that declare `PrincipalDep` never run without a verified principal.
# Tests replace any of these factories through `app.dependency_overrides`.

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header

from src.api.api_config import ApiConfig, get_api_config
from src.api.db_access import DatabaseClient
from src.api.error_handlers import unauthorized
from src.api.security import Principal, parse_bearer_header
from src.api.services.comment_service import CommentService
from src.api.services.credential_service import CredentialService
from src.api.services.feed_service import FeedService
from src.api.services.follow_service import FollowService
from src.api.services.resource_service import ResourceService
from src.api.services.token_service import TokenService

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_database_client() -> DatabaseClient:
    config = get_api_config()
    return DatabaseClient(
        database_url=config.database_url,
        pool_size=config.db_pool_size,
        max_overflow=config.db_max_overflow,
        query_timeout_seconds=config.query_timeout_seconds,
    )


@lru_cache(maxsize=1)
def get_token_service() -> TokenService:
    return TokenService.from_config(get_api_config())


@lru_cache(maxsize=1)
def get_credential_service() -> CredentialService:
    return CredentialService(config=get_api_config(), db=get_database_client())


@lru_cache(maxsize=1)
def get_resource_service() -> ResourceService:
    return ResourceService(config=get_api_config(), db=get_database_client())


@lru_cache(maxsize=1)
def get_feed_service() -> FeedService:
    return FeedService(config=get_api_config(), db=get_database_client())


@lru_cache(maxsize=1)
def get_follow_service() -> FollowService:
    return FollowService(config=get_api_config(), db=get_database_client())


@lru_cache(maxsize=1)
def get_comment_service() -> CommentService:
    return CommentService(config=get_api_config(), db=get_database_client(), feed=get_feed_service())


def get_config() -> ApiConfig:
    return get_api_config()


def get_current_principal(
    token_service: Annotated[TokenService, Depends(get_token_service)],
    authorization: Annotated[str | None, Header()] = None,
) -> Principal:
    """Resolve the request's principal from `Authorization: Bearer <token>` or reject with 401."""

    token = parse_bearer_header(authorization)
    if token is None:
        logger.debug("Rejected request with missing or malformed Authorization header")
        raise unauthorized("Unauthorized - missing or invalid token")
    return token_service.verify(token)


PrincipalDep = Annotated[Principal, Depends(get_current_principal)]
ConfigDep = Annotated[ApiConfig, Depends(get_config)]
