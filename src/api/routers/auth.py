# This file defines the unauthenticated signup and login endpoints.
# Login returns a bearer token; every other route expects it in `Authorization: Bearer <token>`.

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from src.api.dependencies import get_credential_service, get_token_service
from src.api.response_envelope import build_object_envelope
from src.api.schemas.auth_schemas import CredentialsIn, TokenResponse, UserResponse
from src.api.services.credential_service import CredentialService
from src.api.services.token_service import TokenService

router = APIRouter(tags=["auth"])
CredentialServiceDep = Annotated[CredentialService, Depends(get_credential_service)]
TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]


@router.post("/signup", response_model=UserResponse, status_code=201)
def signup(
    body: CredentialsIn,
    request: Request,
    credentials: CredentialServiceDep,
) -> dict[str, object]:
    user = credentials.register(username=body.username, password=body.password)
    return build_object_envelope(request_id=request.state.request_id, data=user)


@router.post("/login", response_model=TokenResponse)
def login(
    body: CredentialsIn,
    request: Request,
    credentials: CredentialServiceDep,
    tokens: TokenServiceDep,
) -> dict[str, object]:
    principal = credentials.authenticate(username=body.username, password=body.password)
    token = tokens.issue(principal)
    return build_object_envelope(
        request_id=request.state.request_id,
        data={"token": token, "token_type": "bearer", "expires_in": tokens.ttl_seconds},
    )
