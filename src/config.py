"""Application configuration using pydantic-settings pattern."""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "Recruiting Match Engine"
    app_version: str = "0.1.0"
    app_env: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Reference data
    school_corpus_path: Path | None = Field(
        default=None,
        description="JSON dataset of institutions (college logos)",
    )

    # Player matching
    match_candidate_limit: int = Field(
        default=10,
        ge=1,
        description="Max records fetched per exact-match channel",
    )
    partial_name_candidate_limit: int = Field(
        default=20,
        ge=1,
        description="Max records fetched per partial-name channel",
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
