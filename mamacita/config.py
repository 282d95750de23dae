"""
Configuration and settings for the Mamacita API.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_version: str = Field(default="v1")
    environment: str = Field(default="production")
    locale: str = Field(default="pt-BR")

    # Database (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None)

    # JWT
    jwt_secret: str = Field(default="dev-secret-key-change-me")
    jwt_expires_minutes: int = Field(default=60 * 24 * 7)

    # CORS, comma separated
    allowed_origins: str = Field(
        default="http://localhost:8081,http://localhost:3001"
    )

    # Rate limiting
    rate_limit_window_ms: int = Field(default=15 * 60 * 1000)
    rate_limit_max_requests: int = Field(default=100)
    redis_url: Optional[str] = Field(default=None)
    redis_rate_limit_prefix: str = Field(default="mamacita:ratelimit")

    # S3-compatible media storage
    storage_bucket: Optional[str] = Field(default=None)
    storage_endpoint: Optional[str] = Field(default=None)
    storage_region: Optional[str] = Field(default=None)
    storage_public_base_url: Optional[str] = Field(default=None)
    aws_access_key_id: Optional[str] = Field(default=None)
    aws_secret_access_key: Optional[str] = Field(default=None)
    max_upload_bytes: int = Field(default=10 * 1024 * 1024)

    # Outbound email
    smtp_host: Optional[str] = Field(default=None)
    smtp_port: int = Field(default=587)
    smtp_user: Optional[str] = Field(default=None)
    smtp_password: Optional[str] = Field(default=None)
    email_from: str = Field(default="no-reply@mamacita.app")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)

    @property
    def api_prefix(self) -> str:
        return f"/api/{self.api_version}"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
