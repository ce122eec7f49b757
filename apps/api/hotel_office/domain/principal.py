"""Principal field rules and explicit write-path steps."""

from __future__ import annotations

from datetime import UTC, datetime
import re
from typing import TYPE_CHECKING

from hotel_office.adapters.auth.base import InvalidCredentialInputError, PasswordHasher
from hotel_office.errors import validation_failed
from hotel_office.schemas.auth import Role

if TYPE_CHECKING:
    from hotel_office.repositories.memory import PrincipalRecord

USERNAME_MIN_LENGTH = 3
EMAIL_MAX_LENGTH = 254
# Every repeated group starts with a separator; ASCII word characters only.
EMAIL_PATTERN = re.compile(r"\w+(?:[.-]\w+)*@\w+(?:[.-]\w+)*\.\w{2,3}", re.ASCII)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_username(username: str) -> str:
    value = username.strip()
    if not value:
        raise validation_failed("username", "required", "Username is required")
    if len(value) < USERNAME_MIN_LENGTH:
        raise validation_failed(
            "username",
            "min_length",
            f"Username must be at least {USERNAME_MIN_LENGTH} characters long",
        )
    return value


def validate_email(email: str) -> str:
    value = normalize_email(email)
    if not value:
        raise validation_failed("email", "required", "Email is required")
    if len(value) > EMAIL_MAX_LENGTH:
        raise validation_failed(
            "email",
            "max_length",
            f"Email must be at most {EMAIL_MAX_LENGTH} characters long",
        )
    if EMAIL_PATTERN.fullmatch(value) is None:
        raise validation_failed("email", "pattern", "Please fill a valid email address")
    return value


def resolve_role(role: str | None) -> Role:
    """Map the optional requested role onto its canonical spelling; absent or empty means ``user``."""
    if not role:
        return Role.USER
    try:
        return Role(role)
    except ValueError:
        raise validation_failed(
            "role",
            "enum",
            f"Role must be one of: {', '.join(r.value for r in Role)}",
        ) from None


def hash_credential(plaintext: str, hasher: PasswordHasher) -> str:
    """Hash a freshly received plaintext, translating input rejections into field errors."""
    try:
        return hasher.hash(plaintext)
    except InvalidCredentialInputError as exc:
        raise validation_failed("password", exc.rule, str(exc)) from exc


def hash_if_changed(plaintext: str | None, hasher: PasswordHasher) -> str | None:
    """Return a new hash only when a new plaintext was supplied; ``None`` keeps the stored one."""
    if plaintext is None:
        return None
    return hash_credential(plaintext, hasher)


def touch_updated_at(record: PrincipalRecord, now: datetime | None = None) -> PrincipalRecord:
    record.updated_at = now or datetime.now(UTC)
    return record
