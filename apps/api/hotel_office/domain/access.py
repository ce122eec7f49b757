"""Role membership checks."""

from collections.abc import Iterable

from hotel_office.errors import forbidden
from hotel_office.schemas.auth import AuthPrincipal, Role


def _canonical(roles: Iterable[Role | str]) -> frozenset[str]:
    return frozenset(role.value if isinstance(role, Role) else role for role in roles)


def authorize(principal: AuthPrincipal, allowed_roles: Iterable[Role | str]) -> bool:
    """Return whether the principal's role is one of ``allowed_roles``; an empty set never matches."""
    return principal.role.value in _canonical(allowed_roles)


def ensure_authorized(principal: AuthPrincipal, allowed_roles: Iterable[Role | str]) -> None:
    allowed = _canonical(allowed_roles)
    if not authorize(principal, allowed):
        raise forbidden(principal.role.value, allowed)
