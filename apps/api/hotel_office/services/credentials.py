"""Signup, login and account self-service."""

from __future__ import annotations

import logging

from hotel_office.adapters.auth import PasswordHasher, TokenService
from hotel_office.core.logging_safety import safe_log_email, safe_log_identifier
from hotel_office.domain.access import authorize
from hotel_office.domain.principal import (
    hash_credential,
    hash_if_changed,
    normalize_email,
    resolve_role,
    touch_updated_at,
    validate_email,
    validate_username,
)
from hotel_office.errors import conflict, forbidden, not_found, unauthenticated
from hotel_office.repositories.memory import DuplicateKeyError, InMemoryStore, PrincipalRecord
from hotel_office.schemas.auth import (
    AuthPrincipal,
    CredentialResponse,
    LoginRequest,
    Profile,
    Role,
    SignupRequest,
    UpdateProfileRequest,
)

logger = logging.getLogger(__name__)

INVALID_LOGIN_MESSAGE = "Invalid email or password"
DUPLICATE_PRINCIPAL_MESSAGE = "User with that email or username already exists."


class CredentialService:
    def __init__(self, store: InMemoryStore, hasher: PasswordHasher, tokens: TokenService) -> None:
        self._store = store
        self._hasher = hasher
        self._tokens = tokens

    def signup(self, payload: SignupRequest, *, caller: AuthPrincipal | None = None) -> CredentialResponse:
        """Register a principal and issue its first token.

        Any role other than ``user`` must be granted by an authenticated admin ``caller``.
        """
        username = payload.username.strip()
        email = normalize_email(payload.email)

        if self._store.find_by_username_or_email(username=username, email=email) is not None:
            logger.info("signup.rejected email=%s reason=duplicate", safe_log_email(email))
            raise conflict(DUPLICATE_PRINCIPAL_MESSAGE)

        username = validate_username(username)
        email = validate_email(email)
        role = resolve_role(payload.role)
        if role is not Role.USER and (caller is None or not authorize(caller, {Role.ADMIN})):
            logger.warning(
                "signup.rejected email=%s reason=role_elevation_without_admin requested_role=%s",
                safe_log_email(email),
                role.value,
            )
            raise forbidden(caller.role.value if caller is not None else "anonymous", {Role.ADMIN.value})

        return self._register(username=username, email=email, password=payload.password, role=role)

    def provision(self, *, username: str, email: str, password: str, role: Role) -> PrincipalRecord | None:
        """Create a principal from trusted configuration; returns ``None`` when one already exists."""
        username = validate_username(username)
        email = validate_email(email)
        if self._store.find_by_username_or_email(username=username, email=email) is not None:
            return None
        credential_hash = hash_credential(password, self._hasher)
        record = self._store.create_principal(
            username=username,
            email=email,
            role=role,
            credential_hash=credential_hash,
        )
        logger.info(
            "principal.provisioned principal_id=%s role=%s",
            safe_log_identifier(record.id, prefix="pid"),
            record.role.value,
        )
        return record

    def login(self, payload: LoginRequest) -> CredentialResponse:
        email = normalize_email(payload.email)
        found = self._store.find_by_email_with_credential(email) if email else None

        if found is None:
            self._hasher.verify_decoy(payload.password)
            logger.info("login.rejected email=%s", safe_log_email(email))
            raise unauthenticated(INVALID_LOGIN_MESSAGE)

        if not self._hasher.verify(payload.password, found.credential_hash):
            logger.info("login.rejected email=%s", safe_log_email(email))
            raise unauthenticated(INVALID_LOGIN_MESSAGE)

        record = found.principal
        logger.info("login.accepted principal_id=%s", safe_log_identifier(record.id, prefix="pid"))
        return self._credential_response(record)

    def get_profile(self, *, principal_id: str) -> Profile:
        record = self._store.find_public_by_id(principal_id)
        if record is None:
            raise not_found("User not found.")
        return self._to_profile(record)

    def update_profile(self, *, principal_id: str, payload: UpdateProfileRequest) -> Profile:
        record = self._store.find_public_by_id(principal_id)
        if record is None:
            raise not_found("User not found.")

        if payload.username is not None:
            record.username = validate_username(payload.username)
        if payload.email is not None:
            record.email = validate_email(payload.email)
        credential_hash = hash_if_changed(payload.password, self._hasher)
        touch_updated_at(record)

        try:
            saved = self._store.save_principal(record, credential_hash=credential_hash)
        except DuplicateKeyError as exc:
            raise conflict(DUPLICATE_PRINCIPAL_MESSAGE, field=exc.field) from exc
        if saved is None:
            raise not_found("User not found.")

        logger.info(
            "principal.updated principal_id=%s credential_changed=%s",
            safe_log_identifier(saved.id, prefix="pid"),
            credential_hash is not None,
        )
        return self._to_profile(saved)

    def _register(self, *, username: str, email: str, password: str, role: Role) -> CredentialResponse:
        credential_hash = hash_credential(password, self._hasher)
        try:
            record = self._store.create_principal(
                username=username,
                email=email,
                role=role,
                credential_hash=credential_hash,
            )
        except DuplicateKeyError as exc:
            # Lost a race with a concurrent signup after the existence probe.
            raise conflict(DUPLICATE_PRINCIPAL_MESSAGE, field=exc.field) from exc

        logger.info(
            "signup.accepted principal_id=%s role=%s",
            safe_log_identifier(record.id, prefix="pid"),
            record.role.value,
        )
        return self._credential_response(record)

    def _credential_response(self, record: PrincipalRecord) -> CredentialResponse:
        return CredentialResponse(
            id=record.id,
            username=record.username,
            email=record.email,
            role=record.role,
            token=self._tokens.issue(record.id),
        )

    @staticmethod
    def _to_profile(record: PrincipalRecord) -> Profile:
        return Profile(
            id=record.id,
            username=record.username,
            email=record.email,
            role=record.role,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


__all__ = ["CredentialService", "INVALID_LOGIN_MESSAGE"]
