"""Bearer-token authentication gate."""

from __future__ import annotations

import logging

from hotel_office.adapters.auth import AuthVerificationError, TokenService
from hotel_office.errors import internal_error, unauthenticated
from hotel_office.repositories.memory import InMemoryStore
from hotel_office.schemas.auth import AuthPrincipal

BEARER_PREFIX = "Bearer "

logger = logging.getLogger(__name__)


class AuthGate:
    """Resolves the caller behind an ``Authorization`` header or rejects the request.

    Steps run in a fixed order: header shape, token signature and expiry, then the
    principal lookup. The store is never consulted for a token that fails verification,
    and a verified token whose principal no longer exists is still rejected.
    """

    def __init__(self, tokens: TokenService, store: InMemoryStore) -> None:
        self._tokens = tokens
        self._store = store

    @staticmethod
    def extract_token(authorization: str | None) -> str | None:
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            return None
        token = authorization[len(BEARER_PREFIX):]
        return token or None

    def authenticate(self, authorization: str | None) -> AuthPrincipal:
        token = self.extract_token(authorization)
        if token is None:
            raise unauthenticated("Not authorized, no token.")

        try:
            principal_id = self._tokens.verify(token)
        except AuthVerificationError as exc:
            raise unauthenticated(f"Not authorized, {exc.reason}.") from exc
        except Exception as exc:
            logger.exception("auth.verification_error")
            raise internal_error("Server error during token verification.") from exc

        try:
            record = self._store.find_public_by_id(principal_id)
        except Exception as exc:
            logger.exception("auth.principal_lookup_error")
            raise internal_error("Server error during token verification.") from exc

        if record is None:
            raise unauthenticated("Not authorized, principal not found.")

        return AuthPrincipal(
            id=record.id,
            username=record.username,
            email=record.email,
            role=record.role,
        )


__all__ = ["AuthGate", "BEARER_PREFIX"]
