"""
Configuration and settings for the gallery API.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ImageUrlStrategy(str, Enum):
    """How the displayable `imageUrl` of an image is derived."""

    # uc?export=view link built from the file id. Simple, but Drive may
    # refuse to serve these when they are embedded on another site.
    DIRECT = "direct"
    # The file's thumbnailLink with its =s<N> size rewritten. Relies on an
    # undocumented URL convention of the thumbnail host.
    THUMBNAIL = "thumbnail"


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    log_level: str = Field(default="INFO")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["https://verti.ng", "http://verti.ng"]
    )

    # Google OAuth client plus a pre-provisioned offline refresh token
    client_id: Optional[str] = Field(default=None)
    client_secret: Optional[str] = Field(default=None)
    redirect_uri: Optional[str] = Field(default=None)
    refresh_token: Optional[str] = Field(default=None)

    # Drive folders
    main_folder_id: Optional[str] = Field(default=None)
    news_folder_id: Optional[str] = Field(default=None)

    # Caching and aggregation
    cache_ttl_seconds: float = Field(default=600, gt=0)
    excerpt_length: int = Field(default=200, ge=1)
    image_url_strategy: ImageUrlStrategy = Field(default=ImageUrlStrategy.THUMBNAIL)
    thumbnail_size: int = Field(default=1600, ge=1)
    upstream_timeout_seconds: float = Field(default=30, gt=0)
    gallery_failure_policy: Literal["skip", "strict"] = Field(default="skip")

    # Development toggles
    use_in_memory_backends: bool = Field(default=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
