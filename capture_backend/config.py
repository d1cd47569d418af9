"""
Configuration and settings for the capture backend.
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

    api_title: str = Field(default="Field Capture Backend")
    api_prefix: str = Field(default="/api")

    # Database (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None, env="DATABASE_URL")

    # S3-compatible storage for capture photos
    s3_endpoint: Optional[str] = Field(default=None, env="S3_ENDPOINT")
    s3_region: Optional[str] = Field(default=None, env="S3_REGION")
    s3_bucket: Optional[str] = Field(default=None, env="S3_BUCKET")
    aws_access_key_id: Optional[str] = Field(
        default=None, env="AWS_ACCESS_KEY_ID"
    )
    aws_secret_access_key: Optional[str] = Field(
        default=None, env="AWS_SECRET_ACCESS_KEY"
    )
    storage_public_base_url: Optional[str] = Field(
        default=None, env="STORAGE_PUBLIC_BASE_URL"
    )

    # Sessions (Redis)
    redis_url: Optional[str] = Field(default=None, env="REDIS_URL")
    redis_session_prefix: str = Field(
        default="capture:session:", env="REDIS_SESSION_PREFIX"
    )
    session_ttl_seconds: int = Field(default=86400, env="SESSION_TTL_SECONDS")

    # Capture entry behaviour
    capture_redirect_delay_seconds: float = Field(
        default=2.0, env="CAPTURE_REDIRECT_DELAY_SECONDS"
    )
    cleanup_orphaned_photos: bool = Field(
        default=False, env="CLEANUP_ORPHANED_PHOTOS"
    )
    max_photo_bytes: int = Field(default=10 * 1024 * 1024, env="MAX_PHOTO_BYTES")

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, env="USE_IN_MEMORY_BACKENDS"
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
