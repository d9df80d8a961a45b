from __future__ import annotations

import json
from functools import lru_cache
from typing import Annotated, Any

from loguru import logger
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
from rich.console import Console

from gitviz.core.time_range import DEFAULT_TIME_RANGE, TIME_RANGE_KEYS

console = Console()
log = logger.bind(module="config")

_DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:3000",
]


class Settings(BaseSettings):
    """Centralised application configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    app_name: str = Field(default="GitViz", alias="APP_NAME")
    environment: str = Field(default="development", alias="APP_ENV")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    github_api_base_url: str = Field(default="https://api.github.com", alias="GITHUB_API_BASE_URL")
    github_timeout_seconds: float = Field(default=10.0, alias="GITHUB_TIMEOUT_SECONDS")
    github_user_agent: str = Field(default="gitviz", alias="GITHUB_USER_AGENT")
    # GitHub refuses per_page above 100; results past the page cap are truncated.
    github_page_size: int = Field(default=100, ge=1, le=100, alias="GITHUB_PAGE_SIZE")
    github_max_pages: int = Field(default=1, ge=1, alias="GITHUB_MAX_PAGES")

    fetch_max_workers: int = Field(default=4, ge=1, alias="GITVIZ_FETCH_WORKERS")
    default_time_range: str = Field(default=DEFAULT_TIME_RANGE, alias="GITVIZ_DEFAULT_TIME_RANGE")
    pr_list_limit: int = Field(default=50, ge=0, alias="GITVIZ_PR_LIST_LIMIT")

    api_cors_origins: Annotated[list[str], NoDecode] = Field(
        default_factory=lambda: list(_DEFAULT_CORS_ORIGINS),
        alias="API_CORS_ORIGINS",
    )

    @field_validator("default_time_range")
    @classmethod
    def _known_time_range(cls, v: str) -> str:
        v = v.strip()
        if v not in TIME_RANGE_KEYS:
            raise ValueError(f"must be one of {', '.join(TIME_RANGE_KEYS)}")
        return v

    @field_validator("api_cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, v: object) -> object:
        # Accept a comma-separated string as well as a JSON list.
        if not isinstance(v, str):
            return v
        text = v.strip()
        if text.startswith("["):
            return json.loads(text)
        return [item.strip() for item in text.split(",") if item.strip()]

    def export_safe(self) -> dict[str, Any]:
        """Return non-sensitive settings for debugging/logging."""
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "github_api_base_url": self.github_api_base_url,
            "github_timeout_seconds": self.github_timeout_seconds,
            "github_page_size": self.github_page_size,
            "github_max_pages": self.github_max_pages,
            "fetch_max_workers": self.fetch_max_workers,
            "default_time_range": self.default_time_range,
        }


@lru_cache
def get_settings() -> Settings:
    """Load and cache application settings."""
    settings = Settings()
    console.log(
        f"[bold green]Loaded settings[/] env={settings.environment!r} "
        f"github={settings.github_api_base_url!r}",
    )
    log.info("Settings initialised: {}", settings.export_safe())
    return settings
