"""Authentication schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class AuthPrincipal(BaseModel):
    """Authenticated principal attached to the request; never carries a credential."""

    id: str = Field(min_length=1)
    username: str
    email: str
    role: Role = Role.USER

    model_config = ConfigDict(frozen=True)


class SignupRequest(BaseModel):
    username: str
    email: str
    password: str
    role: str | None = None


class LoginRequest(BaseModel):
    email: str
    password: str


class UpdateProfileRequest(BaseModel):
    username: str | None = None
    email: str | None = None
    password: str | None = None

    model_config = ConfigDict(extra="forbid")


class CredentialResponse(BaseModel):
    """Signup/login response body; ``id`` is serialized as ``_id``."""

    id: str = Field(serialization_alias="_id")
    username: str
    email: str
    role: Role
    token: str


class Profile(BaseModel):
    id: str = Field(serialization_alias="_id")
    username: str
    email: str
    role: Role
    created_at: datetime
    updated_at: datetime
