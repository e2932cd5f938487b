# This file defines endpoints about users: profiles and the follow graph.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from src.api.dependencies import PrincipalDep, get_credential_service, get_follow_service
from src.api.response_envelope import build_object_envelope
from src.api.schemas.auth_schemas import UserResponse
from src.api.services.credential_service import CredentialService
from src.api.services.follow_service import FollowService

router = APIRouter(prefix="/users", tags=["users"])
FollowServiceDep = Annotated[FollowService, Depends(get_follow_service)]
CredentialServiceDep = Annotated[CredentialService, Depends(get_credential_service)]


@router.get("/me", response_model=UserResponse)
def current_user(request: Request, principal: PrincipalDep) -> dict[str, object]:
    return build_object_envelope(request_id=request.state.request_id, data=principal.as_dict())


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    request: Request,
    principal: PrincipalDep,
    credentials: CredentialServiceDep,
) -> dict[str, object]:
    user = credentials.get_user(user_id)
    return build_object_envelope(request_id=request.state.request_id, data=user)


@router.put("/{user_id}/follow", status_code=204)
def follow_user(
    user_id: int,
    principal: PrincipalDep,
    follows: FollowServiceDep,
) -> Response:
    follows.follow(principal, user_id)
    return Response(status_code=204)


@router.delete("/{user_id}/follow", status_code=204)
def unfollow_user(
    user_id: int,
    principal: PrincipalDep,
    follows: FollowServiceDep,
) -> Response:
    follows.unfollow(principal, user_id)
    return Response(status_code=204)
