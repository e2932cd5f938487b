# This file defines the activity feed endpoint.
# The feed shares the resource list's limit/offset/sort contract and adds tag and time-window filters.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from src.api.dependencies import ConfigDep, PrincipalDep, get_feed_service
from src.api.error_handlers import APIError
from src.api.pagination import build_list_query
from src.api.response_envelope import build_list_envelope
from src.api.schemas.feed_schemas import FeedResponseV1
from src.api.services.feed_service import FeedService

router = APIRouter(prefix="/feed", tags=["feed"])
FeedServiceDep = Annotated[FeedService, Depends(get_feed_service)]


@router.get("", response_model=FeedResponseV1)
def get_feed(
    request: Request,
    principal: PrincipalDep,
    service: FeedServiceDep,
    config: ConfigDep,
    search: str | None = Query(default=None),
    tags: str | None = Query(default=None, description="Comma-separated tags; all must match."),
    since: str | None = Query(default=None),
    until: str | None = Query(default=None),
    sort: str | None = Query(default=None),
    order: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    offset: int | None = Query(default=None),
) -> dict[str, object]:
    try:
        list_query = build_list_query(
            limit=limit,
            offset=offset,
            sort=sort,
            order=order,
            default_limit=config.default_page_size,
            max_limit=config.max_page_size,
            default_sort="created_at",
            default_order="desc",
            search=search,
            tags=tags,
            since=since,
            until=until,
        )
    except ValueError as exc:
        raise APIError(
            status_code=400,
            error_code="INVALID_QUERY_PARAM",
            message=str(exc),
        ) from exc

    rows = service.get_feed(principal, list_query)
    return build_list_envelope(
        request_id=request.state.request_id,
        data=rows,
        pagination=list_query.pagination_block(count=len(rows)),
    )
