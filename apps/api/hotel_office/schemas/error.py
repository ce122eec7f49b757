"""API error response schemas."""

from typing import Any

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: dict[str, Any] | None = None


class ValidationErrorDetails(BaseModel):
    field: str
    rule: str


class ValidationFailedError(BaseModel):
    code: str = "VALIDATION_FAILED"
    message: str
    details: ValidationErrorDetails


class ForbiddenErrorDetails(BaseModel):
    role: str
    allowed_roles: list[str]


class ForbiddenError(BaseModel):
    code: str = "FORBIDDEN"
    message: str
    details: ForbiddenErrorDetails
