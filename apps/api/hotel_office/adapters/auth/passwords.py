"""bcrypt password hasher adapter."""

from __future__ import annotations

import logging
import secrets

import bcrypt

from hotel_office.adapters.auth.base import InvalidCredentialInputError, PasswordHasher

PASSWORD_MIN_LENGTH = 6
# bcrypt only consumes the first 72 bytes of input.
PASSWORD_MAX_BYTES = 72

logger = logging.getLogger(__name__)


class BcryptPasswordHasher(PasswordHasher):
    """Salted adaptive hashing; the cost factor is embedded in every hash it produces."""

    def __init__(self, rounds: int = 10) -> None:
        self._rounds = rounds
        decoy = secrets.token_urlsafe(32).encode("utf-8")
        self._decoy_hash = bcrypt.hashpw(decoy, bcrypt.gensalt(rounds=rounds))

    def hash(self, plaintext: str) -> str:
        if not plaintext:
            raise InvalidCredentialInputError("required", "Password is required")
        if len(plaintext) < PASSWORD_MIN_LENGTH:
            raise InvalidCredentialInputError(
                "min_length",
                f"Password must be at least {PASSWORD_MIN_LENGTH} characters long",
            )
        encoded = plaintext.encode("utf-8")
        if len(encoded) > PASSWORD_MAX_BYTES:
            raise InvalidCredentialInputError(
                "max_bytes",
                f"Password must be at most {PASSWORD_MAX_BYTES} bytes long",
            )
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self._rounds)).decode("utf-8")

    def verify(self, plaintext: str, credential_hash: str) -> bool:
        if not plaintext or not credential_hash:
            return False
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), credential_hash.encode("utf-8"))
        except ValueError:
            # Oversized input or a stored value that is not a bcrypt hash.
            logger.warning("password.verify_unusable_input")
            return False

    def verify_decoy(self, plaintext: str) -> bool:
        try:
            bcrypt.checkpw((plaintext or "").encode("utf-8")[:PASSWORD_MAX_BYTES], self._decoy_hash)
        except ValueError:
            logger.warning("password.verify_unusable_input")
        return False


__all__ = ["BcryptPasswordHasher", "PASSWORD_MAX_BYTES", "PASSWORD_MIN_LENGTH"]
