"""HMAC-signed JWT token service adapter."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Callable

import jwt

from hotel_office.adapters.auth.base import (
    BadSignatureError,
    MalformedTokenError,
    SigningKeyMissingError,
    TokenExpiredError,
    TokenService,
)

TOKEN_TTL = timedelta(days=30)
_REQUIRED_CLAIMS = ["sub", "iat", "exp"]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class JwtTokenService(TokenService):
    """Stateless bearer tokens: ``sub`` is the principal id, validity is signature plus ``exp``.

    Only the configured algorithm is accepted on verification, so a token re-signed with
    ``none`` or a different HMAC size is rejected as a bad signature. Expiry is checked
    against the injected clock after the signature has been validated.
    """

    def __init__(
        self,
        secret: str | None,
        *,
        algorithm: str = "HS256",
        ttl: timedelta = TOKEN_TTL,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        if not secret:
            raise SigningKeyMissingError("Token signing secret is not configured")
        self._secret = secret
        self._algorithm = algorithm
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, principal_id: str) -> str:
        if not principal_id:
            raise ValueError("principal_id is required")
        issued_at = self._clock()
        payload = {
            "sub": str(principal_id),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> str:
        if not token:
            raise MalformedTokenError()
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "require": _REQUIRED_CLAIMS},
            )
        except jwt.InvalidSignatureError as exc:
            raise BadSignatureError() from exc
        except jwt.InvalidAlgorithmError as exc:
            raise BadSignatureError() from exc
        except jwt.InvalidTokenError as exc:
            raise MalformedTokenError() from exc

        expires_at = claims["exp"]
        if isinstance(expires_at, bool) or not isinstance(expires_at, (int, float)):
            raise MalformedTokenError()
        if self._clock().timestamp() >= expires_at:
            raise TokenExpiredError()

        principal_id = claims["sub"]
        if not isinstance(principal_id, str) or not principal_id.strip():
            raise MalformedTokenError()
        return principal_id


__all__ = ["JwtTokenService", "TOKEN_TTL"]
