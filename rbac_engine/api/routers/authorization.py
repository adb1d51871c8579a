"""Authorization API endpoints.

Every route answers with ``{"authorized": bool}``. Unknown containers and
corrupt hierarchies surface as 404/409 so that "could not decide" is never
confused with a denial.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from rbac_engine.api.dependencies import get_authorization_service
from rbac_engine.schemas.authorization import (
    AuthorizationRequest,
    AuthorizationResponse,
    BatchAuthorizationRequest,
    ContainerAuthorizationRequest,
    RoleCheckRequest,
)
from rbac_engine.services.authorization import AuthorizationService

router = APIRouter()


@router.post(
    "/authorize",
    response_model=AuthorizationResponse,
)
def authorize(
    payload: AuthorizationRequest,
    service: AuthorizationService = Depends(get_authorization_service),
) -> AuthorizationResponse:
    return AuthorizationResponse(authorized=service.authorize(payload))


@router.post(
    "/authorize/container",
    response_model=AuthorizationResponse,
)
def authorize_in_container(
    payload: ContainerAuthorizationRequest,
    service: AuthorizationService = Depends(get_authorization_service),
) -> AuthorizationResponse:
    return AuthorizationResponse(authorized=service.authorize_in_container(payload))


@router.post(
    "/authorize/role",
    response_model=AuthorizationResponse,
)
def check_role(
    payload: RoleCheckRequest,
    service: AuthorizationService = Depends(get_authorization_service),
) -> AuthorizationResponse:
    return AuthorizationResponse(authorized=service.authorize_role(payload))


@router.post(
    "/authorize/batch",
    response_model=AuthorizationResponse,
)
def authorize_batch(
    payload: BatchAuthorizationRequest,
    service: AuthorizationService = Depends(get_authorization_service),
) -> AuthorizationResponse:
    return AuthorizationResponse(authorized=service.authorize_batch(payload))
