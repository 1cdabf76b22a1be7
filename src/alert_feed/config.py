# ABOUTME: Centralized configuration using Pydantic Settings.
# ABOUTME: Loads feed and logging settings from environment variables and .env file.

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

NWS_NATIONAL_ATOM_FEED_URL = "https://alerts.weather.gov/cap/us.php?x=1"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Feed
    feed_url: str = NWS_NATIONAL_ATOM_FEED_URL
    feed_timeout: float = 30.0
    feed_user_agent: str = "alert-feed/0.1 (NWS CAP Atom client)"

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"  # "console" or "json"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Settings are loaded from environment variables and .env file.
    """
    return Settings()
