"""Application exception types."""

from typing import Any, Iterable

from hotel_office.schemas.error import ErrorResponse


class ApiError(Exception):
    """Structured API error that maps directly to contract error payloads."""

    def __init__(self, status_code: int, code: str, message: str, details: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = ErrorResponse(code=code, message=message, details=details)
        super().__init__(message)


def validation_failed(field: str, rule: str, message: str) -> ApiError:
    return ApiError(
        status_code=400,
        code="VALIDATION_FAILED",
        message=message,
        details={"field": field, "rule": rule},
    )


def conflict(message: str, *, field: str | None = None) -> ApiError:
    return ApiError(
        status_code=409,
        code="CONFLICT",
        message=message,
        details={"field": field} if field else None,
    )


def unauthenticated(message: str) -> ApiError:
    return ApiError(status_code=401, code="UNAUTHENTICATED", message=message)


def forbidden(role: Any, allowed_roles: Iterable[str]) -> ApiError:
    return ApiError(
        status_code=403,
        code="FORBIDDEN",
        message=f"User role {role} is not authorized to access this route.",
        details={"role": str(role), "allowed_roles": sorted(allowed_roles)},
    )


def not_found(message: str) -> ApiError:
    return ApiError(status_code=404, code="NOT_FOUND", message=message)


def internal_error(message: str = "Internal server error") -> ApiError:
    return ApiError(status_code=500, code="INTERNAL_ERROR", message=message)


__all__ = [
    "ApiError",
    "conflict",
    "forbidden",
    "internal_error",
    "not_found",
    "unauthenticated",
    "validation_failed",
]
