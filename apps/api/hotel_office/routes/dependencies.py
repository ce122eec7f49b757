"""Dependency wiring for routes."""

from __future__ import annotations

import logging
from typing import Annotated, Callable
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import APIKeyHeader

from hotel_office.adapters.auth import PasswordHasher, TokenService
from hotel_office.core.logging_safety import safe_log_identifier
from hotel_office.domain.access import ensure_authorized
from hotel_office.errors import ApiError
from hotel_office.repositories.memory import InMemoryStore
from hotel_office.schemas.auth import AuthPrincipal, Role
from hotel_office.services.auth_gate import AuthGate
from hotel_office.services.credentials import CredentialService

# Read the raw header: the ``Bearer `` prefix is matched case-sensitively by AuthGate.
authorization_header = APIKeyHeader(
    name="Authorization",
    auto_error=False,
    scheme_name="bearerAuth",
    description="Bearer <token>",
)
logger = logging.getLogger(__name__)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_request_correlation_id(request: Request) -> str:
    return _request_correlation_id(request)


def get_store(request: Request) -> InMemoryStore:
    return request.app.state.store


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_auth_gate(
    tokens: Annotated[TokenService, Depends(get_token_service)],
    store: Annotated[InMemoryStore, Depends(get_store)],
) -> AuthGate:
    return AuthGate(tokens, store)


def _authenticate(request: Request, authorization: str | None, gate: AuthGate) -> AuthPrincipal:
    safe_correlation_id = safe_log_identifier(_request_correlation_id(request), prefix="cid")
    try:
        principal = gate.authenticate(authorization)
    except ApiError as exc:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s status=%s reason=%s",
            safe_correlation_id,
            request.method,
            request.url.path,
            exc.status_code,
            exc.payload.message,
        )
        raise

    logger.info(
        "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s role=%s",
        safe_correlation_id,
        request.method,
        request.url.path,
        safe_log_identifier(principal.id, prefix="pid"),
        principal.role.value,
    )
    request.state.auth_principal = principal
    return principal


async def get_authenticated_principal(
    request: Request,
    authorization: Annotated[str | None, Security(authorization_header)],
    gate: Annotated[AuthGate, Depends(get_auth_gate)],
) -> AuthPrincipal:
    """Validate the bearer token and attach the resolved principal to the request context."""
    return _authenticate(request, authorization, gate)


async def get_optional_principal(
    request: Request,
    authorization: Annotated[str | None, Security(authorization_header)],
    gate: Annotated[AuthGate, Depends(get_auth_gate)],
) -> AuthPrincipal | None:
    """Anonymous callers pass as ``None``; a presented header must still authenticate."""
    if authorization is None:
        return None
    return _authenticate(request, authorization, gate)


def require_roles(*roles: Role) -> Callable[..., object]:
    """Build a dependency that authenticates the caller and then checks role membership."""
    allowed = frozenset(roles)

    async def role_checker(
        request: Request,
        principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    ) -> AuthPrincipal:
        try:
            ensure_authorized(principal, allowed)
        except ApiError:
            logger.warning(
                "auth.forbidden correlation_id=%s method=%s path=%s principal_id=%s role=%s",
                safe_log_identifier(_request_correlation_id(request), prefix="cid"),
                request.method,
                request.url.path,
                safe_log_identifier(principal.id, prefix="pid"),
                principal.role.value,
            )
            raise
        return principal

    return role_checker


def get_credential_service(
    store: Annotated[InMemoryStore, Depends(get_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> CredentialService:
    return CredentialService(store, hasher, tokens)
