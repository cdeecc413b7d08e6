"""Application settings and configuration."""
from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=3000)
    debug: bool = Field(default=False)

    # Upstream feed
    feed_url: str = Field(default="https://trends.google.com/trends/trendingsearches/daily/rss")
    geo: str = Field(default="US")
    fetch_timeout_seconds: float = Field(default=10.0, gt=0)
    fetch_max_attempts: int = Field(default=3, ge=1)

    # Refresh and history
    refresh_interval_minutes: float = Field(default=15.0, gt=0)
    history_window_hours: float = Field(default=24.0, gt=0)
    history_evict_after_cycles: int = Field(default=96, ge=0)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: Optional[str] = Field(default=None, description="console or json, json in production when unset")
    upstream_log_level: str = Field(default="WARNING", description="Level for httpx and uvicorn access logs")
    environment: str = Field(default="development")

    app_name: str = "TrendFeed"

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get settings singleton."""
    return Settings()
