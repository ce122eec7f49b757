"""Credential and token adapters."""

from .base import (
    AuthVerificationError,
    BadSignatureError,
    InvalidCredentialInputError,
    MalformedTokenError,
    PasswordHasher,
    SigningKeyMissingError,
    TokenExpiredError,
    TokenService,
)
from .jwt_tokens import JwtTokenService
from .passwords import BcryptPasswordHasher

__all__ = [
    "AuthVerificationError",
    "BadSignatureError",
    "BcryptPasswordHasher",
    "InvalidCredentialInputError",
    "JwtTokenService",
    "MalformedTokenError",
    "PasswordHasher",
    "SigningKeyMissingError",
    "TokenExpiredError",
    "TokenService",
]
