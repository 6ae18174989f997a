"""
Configuration and settings for the volunteer service.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DATABASE_NAME = "volunteerService-backend-db"
USERS_COLLECTION = "users"
TODOS_COLLECTION = "todos"


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api/v1")

    # Database (MongoDB expected)
    mongo_uri: Optional[str] = Field(default=None)
    mongo_timeout_ms: int = Field(default=5000)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="VOLUNTEER_USE_IN_MEMORY_BACKENDS"
    )

    # Auth
    jwt_secret: str = Field(default="your-secret-key")
    jwt_algorithm: str = Field(default="HS256")
    token_ttl_hours: int = Field(default=24)
    bcrypt_rounds: int = Field(default=12)
    auth_cookie_name: str = Field(default="auth_token")
    auth_cookie_secure: bool = Field(default=True)

    # HTTP
    cors_origin_regex: str = Field(default=r"https?://.*")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8080)
    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
