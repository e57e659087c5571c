"""Application settings using Pydantic Settings."""

from pathlib import Path
from typing import Annotated

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # GitHub API configuration
    github_api_url: str = "https://api.github.com"
    github_token: str | None = None  # Optional, raises the anonymous rate limit
    github_timeout_seconds: float = 30.0

    # Cache configuration
    cache_file_path: str = "frontend/github-repos.json"
    refresh_interval_hours: float = Field(1.0, ge=0)
    repos_per_page: int = Field(4, ge=1, le=100)

    # CORS configuration
    cors_allow_origins: Annotated[list[str], NoDecode] = ["*"]

    @field_validator("cors_allow_origins", mode="before")
    @classmethod
    def parse_origins(cls, v):
        if isinstance(v, str):
            if not v.strip():
                return []
            return [item.strip() for item in v.split(",")]
        return v

    # Server configuration
    server_host: str = "0.0.0.0"
    server_port: int = 8000
    dev: bool = True
    workers: int = 1
    log_level: str = "info"

    @property
    def cache_path(self) -> Path:
        """Cache file location, relative paths resolved against the deployment root."""
        return Path(self.cache_file_path).expanduser().resolve()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


def get_settings() -> Settings:
    """Get application settings instance."""
    return Settings()
