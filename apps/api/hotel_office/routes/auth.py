"""Signup, login and account routes.

Handlers here are plain ``def`` so bcrypt work runs in the worker threadpool
instead of on the event loop.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from hotel_office.routes.dependencies import (
    get_authenticated_principal,
    get_credential_service,
    get_optional_principal,
)
from hotel_office.schemas.auth import (
    AuthPrincipal,
    CredentialResponse,
    LoginRequest,
    Profile,
    SignupRequest,
    UpdateProfileRequest,
)
from hotel_office.schemas.error import ErrorResponse, ForbiddenError, ValidationFailedError
from hotel_office.services.credentials import CredentialService

router = APIRouter(prefix="/user", tags=["Auth"])


@router.post(
    "/signup",
    response_model=CredentialResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ValidationFailedError},
        401: {"model": ErrorResponse},
        403: {"model": ForbiddenError},
        409: {"model": ErrorResponse},
    },
)
def signup(
    payload: SignupRequest,
    caller: Annotated[AuthPrincipal | None, Depends(get_optional_principal)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
) -> CredentialResponse:
    return service.signup(payload, caller=caller)


@router.post(
    "/login",
    response_model=CredentialResponse,
    responses={400: {"model": ValidationFailedError}, 401: {"model": ErrorResponse}},
)
def login(
    payload: LoginRequest,
    service: Annotated[CredentialService, Depends(get_credential_service)],
) -> CredentialResponse:
    return service.login(payload)


@router.get(
    "/me",
    response_model=Profile,
    responses={401: {"model": ErrorResponse}},
)
def get_me(
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
) -> Profile:
    return service.get_profile(principal_id=principal.id)


@router.put(
    "/me",
    response_model=Profile,
    responses={
        400: {"model": ValidationFailedError},
        401: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
def update_me(
    payload: UpdateProfileRequest,
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[CredentialService, Depends(get_credential_service)],
) -> Profile:
    return service.update_profile(principal_id=principal.id, payload=payload)
