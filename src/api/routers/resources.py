# This file defines the owner-scoped resource endpoints under the versioned API path.
# Every route requires a verified principal, which is passed explicitly into the resource service.
# List filtering, sorting, and paging are validated here before any SQL is composed.
# Responses use the shared success envelope; deletes return 204 with no body.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from src.api.dependencies import ConfigDep, PrincipalDep, get_comment_service, get_resource_service
from src.api.error_handlers import APIError
from src.api.pagination import build_list_query
from src.api.response_envelope import build_list_envelope, build_object_envelope
from src.api.schemas.resource_schemas import (
    CommentCreate,
    CommentListResponseV1,
    CommentResponseV1,
    ResourceCreate,
    ResourceListResponseV1,
    ResourceResponseV1,
    ResourceUpdate,
)
from src.api.services.comment_service import CommentService
from src.api.services.resource_service import ResourceService

router = APIRouter(prefix="/resources", tags=["resources"])
ResourceServiceDep = Annotated[ResourceService, Depends(get_resource_service)]
CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]


@router.get("", response_model=ResourceListResponseV1)
def list_resources(
    request: Request,
    principal: PrincipalDep,
    service: ResourceServiceDep,
    config: ConfigDep,
    completed: bool | None = Query(default=None),
    search: str | None = Query(default=None),
    tags: str | None = Query(default=None, description="Comma-separated tags; all must match."),
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
            default_order="asc",
            completed=completed,
            search=search,
            tags=tags,
        )
    except ValueError as exc:
        raise APIError(
            status_code=400,
            error_code="INVALID_QUERY_PARAM",
            message=str(exc),
        ) from exc

    rows = service.list(principal, list_query)
    return build_list_envelope(
        request_id=request.state.request_id,
        data=rows,
        pagination=list_query.pagination_block(count=len(rows)),
    )


@router.get("/{resource_id}", response_model=ResourceResponseV1)
def get_resource(
    resource_id: int,
    request: Request,
    principal: PrincipalDep,
    service: ResourceServiceDep,
) -> dict[str, object]:
    row = service.get(principal, resource_id)
    return build_object_envelope(request_id=request.state.request_id, data=row)


@router.post("", response_model=ResourceResponseV1, status_code=201)
def create_resource(
    body: ResourceCreate,
    request: Request,
    principal: PrincipalDep,
    service: ResourceServiceDep,
) -> dict[str, object]:
    row = service.create(
        principal,
        title=body.title,
        body=body.body,
        completed=body.completed,
        tags=body.tags,
    )
    return build_object_envelope(request_id=request.state.request_id, data=row)


@router.put("/{resource_id}", response_model=ResourceResponseV1)
def update_resource(
    resource_id: int,
    body: ResourceUpdate,
    request: Request,
    principal: PrincipalDep,
    service: ResourceServiceDep,
) -> dict[str, object]:
    row = service.update(
        principal,
        resource_id,
        title=body.title,
        body=body.body,
        completed=body.completed,
        expected_version=body.version,
        tags=body.tags,
    )
    return build_object_envelope(request_id=request.state.request_id, data=row)


@router.delete("/{resource_id}", status_code=204)
def delete_resource(
    resource_id: int,
    principal: PrincipalDep,
    service: ResourceServiceDep,
) -> Response:
    service.delete(principal, resource_id)
    return Response(status_code=204)


@router.delete("", status_code=204)
def delete_all_resources(
    principal: PrincipalDep,
    service: ResourceServiceDep,
) -> Response:
    service.delete_all(principal)
    return Response(status_code=204)


@router.patch("/{resource_id}/toggle", response_model=ResourceResponseV1)
def toggle_resource(
    resource_id: int,
    request: Request,
    principal: PrincipalDep,
    service: ResourceServiceDep,
) -> dict[str, object]:
    row = service.toggle(principal, resource_id)
    return build_object_envelope(request_id=request.state.request_id, data=row)


@router.post("/{resource_id}/comments", response_model=CommentResponseV1, status_code=201)
def comment_on_resource(
    resource_id: int,
    body: CommentCreate,
    request: Request,
    principal: PrincipalDep,
    comments: CommentServiceDep,
) -> dict[str, object]:
    row = comments.add_comment(principal, resource_id, content=body.content)
    return build_object_envelope(request_id=request.state.request_id, data=row)


@router.get("/{resource_id}/comments", response_model=CommentListResponseV1)
def list_resource_comments(
    resource_id: int,
    request: Request,
    principal: PrincipalDep,
    comments: CommentServiceDep,
    config: ConfigDep,
    order: str | None = Query(default=None),
    limit: int | None = Query(default=None),
    offset: int | None = Query(default=None),
) -> dict[str, object]:
    try:
        list_query = build_list_query(
            limit=limit,
            offset=offset,
            sort="created_at",
            order=order,
            default_limit=config.default_page_size,
            max_limit=config.max_page_size,
            default_sort="created_at",
            default_order="asc",
        )
    except ValueError as exc:
        raise APIError(
            status_code=400,
            error_code="INVALID_QUERY_PARAM",
            message=str(exc),
        ) from exc

    rows = comments.list_for_resource(principal, resource_id, list_query)
    return build_list_envelope(
        request_id=request.state.request_id,
        data=rows,
        pagination=list_query.pagination_block(count=len(rows)),
    )
