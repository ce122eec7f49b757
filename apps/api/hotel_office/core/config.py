"""Application configuration."""

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables.

    Instances are immutable; ``create_app`` builds the token service from one of these
    once at startup and never reads the environment again.
    """

    jwt_secret: SecretStr | None = None
    jwt_algorithm: Literal["HS256", "HS384", "HS512"] = "HS256"
    token_ttl_days: int = Field(default=30, ge=1)
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    bootstrap_admin_username: str | None = None
    bootstrap_admin_email: str | None = None
    bootstrap_admin_password: SecretStr | None = None

    model_config = SettingsConfigDict(env_prefix="HOTEL_", extra="ignore", frozen=True)

    @property
    def has_bootstrap_admin(self) -> bool:
        return bool(self.bootstrap_admin_username and self.bootstrap_admin_email and self.bootstrap_admin_password)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
