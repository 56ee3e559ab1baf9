"""Application settings loaded from environment variables and .env file."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the GitHub user search client."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    github_token: str | None = None
    github_api_url: str = "https://api.github.com"
    request_timeout: float = 10.0

    # Response cache (seconds)
    search_cache_ttl: float = 300.0
    profile_cache_ttl: float = 120.0
    cache_maxsize: int = 256

    # Profile enrichment
    enrich_max_users: int = 30
    enrich_batch_size: int = 3
    enrich_batch_delay: float = 1.0
    enrich_rate_limit_buffer: int = 5

    # Policies
    allow_unfiltered_search: bool = False
    cancel_previous_search: bool = False

    token_file: Path | None = None


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
