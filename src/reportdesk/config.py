"""Application configuration utilities."""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Centralized configuration loaded from environment or .env file."""

    api_base_url: str = Field(default="http://localhost:5000", alias="REPORTDESK_API_BASE")
    request_timeout: int = Field(default=30, alias="REPORTDESK_TIMEOUT")
    page_size: int = Field(default=10, alias="REPORTDESK_PAGE_SIZE")
    dashboard_username: Optional[str] = Field(default=None, alias="REPORTDESK_USERNAME")
    dashboard_password: Optional[str] = Field(default=None, alias="REPORTDESK_PASSWORD")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
