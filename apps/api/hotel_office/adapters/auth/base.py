"""Credential and token provider interfaces."""

from abc import ABC, abstractmethod


class AuthVerificationError(Exception):
    """Raised when a token cannot be verified; ``reason`` is safe to return to callers."""

    reason = "token failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason)


class MalformedTokenError(AuthVerificationError):
    reason = "token malformed"


class BadSignatureError(AuthVerificationError):
    reason = "token signature invalid"


class TokenExpiredError(AuthVerificationError):
    reason = "token expired"


class SigningKeyMissingError(RuntimeError):
    """Fatal startup condition: no token signing secret is configured."""


class InvalidCredentialInputError(ValueError):
    """Plaintext credential rejected before hashing."""

    def __init__(self, rule: str, message: str) -> None:
        self.rule = rule
        super().__init__(message)


class TokenService(ABC):
    """Issues and verifies stateless identity tokens."""

    @abstractmethod
    def issue(self, principal_id: str) -> str:
        """Return a signed token for ``principal_id``."""

    @abstractmethod
    def verify(self, token: str) -> str:
        """Return the principal id or raise ``AuthVerificationError``."""


class PasswordHasher(ABC):
    """One-way credential hashing with constant-time verification."""

    @abstractmethod
    def hash(self, plaintext: str) -> str:
        """Return a self-describing salted hash."""

    @abstractmethod
    def verify(self, plaintext: str, credential_hash: str) -> bool:
        """Return whether ``plaintext`` matches; never raises on mismatch."""

    @abstractmethod
    def verify_decoy(self, plaintext: str) -> bool:
        """Spend one verification's worth of work and return False."""


__all__ = [
    "AuthVerificationError",
    "BadSignatureError",
    "InvalidCredentialInputError",
    "MalformedTokenError",
    "PasswordHasher",
    "SigningKeyMissingError",
    "TokenExpiredError",
    "TokenService",
]
