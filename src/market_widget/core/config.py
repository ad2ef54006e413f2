"""
Application configuration using Pydantic Settings.

Supports hierarchical environment configuration:
- .env.base: Common non-secret defaults (committed to git)
- .env.{ENVIRONMENT}: Environment-specific overrides (gitignored)
- Environment variables: Highest priority
"""

import os
from functools import lru_cache
from typing import Any, Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..services.data_manager.keys import CacheKeys

# Get environment from env var, default to development
ENV = os.getenv("ENVIRONMENT") or os.getenv("NODE_ENV") or "development"


class Settings(BaseSettings):
    """Application settings with hierarchical env file support."""

    model_config = SettingsConfigDict(
        env_file=[
            ".env.base",
            f".env.{ENV}",
        ],
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment (NODE_ENV also accepted)
    environment: Literal["development", "test", "production"] = Field(
        default="development",
        validation_alias=AliasChoices("environment", "node_env"),
    )

    @field_validator("environment", mode="before")
    @classmethod
    def normalize_environment(cls, value: Any) -> str:
        """Unknown modes (staging, dev, ...) run as development."""
        mode = str(value).strip().lower()
        return mode if mode in ("development", "test", "production") else "development"

    # Server
    host: str = "0.0.0.0"  # nosec B104 - Required for Docker container
    port: int = 3001
    cors_origins: list[str] = ["*"]
    static_dir: str = "build"  # Built dashboard bundle, served in production only

    # Cache settings - TTL values in seconds by data category
    cache_ttl: int = 30  # Metals + index quotes
    cache_ttl_news: int = 600  # Themed news feeds (10 min)
    cache_ttl_general_news: int = 43200  # General precious metals feed (12 hours)
    cache_ttl_performance: int = 3600  # 20-year performance table (1 hour)

    # External APIs
    metals_api_key: str = ""
    metals_api_url: str = "https://metals-api.com/api/latest"
    news_api_key: str = ""
    news_api_url: str = "https://newsapi.org/v2/everything"
    upstream_timeout_seconds: float = 10.0

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    def cache_ttl_table(self) -> dict[str, int]:
        """Per-key TTL table handed to the cache store.

        Themed news feeds use ``cache_ttl_news``; every other key is listed.
        """
        ttls = {
            CacheKeys.METALS: self.cache_ttl,
            CacheKeys.INDICES: self.cache_ttl,
            CacheKeys.NEWS: self.cache_ttl_general_news,
            CacheKeys.PERFORMANCE: self.cache_ttl_performance,
        }
        return {key: ttls.get(key, self.cache_ttl_news) for key in CacheKeys.all()}


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
