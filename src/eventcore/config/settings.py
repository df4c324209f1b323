"""Application settings using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from ``EVENTCORE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EVENTCORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Diagnostics
    debug: bool = False
    log_level: str = "INFO"
    log_json: bool = False

    # Channels
    offer_timeout_seconds: float = 120.0
    drain_poll_interval_seconds: float = 0.2
    drain_timeout_seconds: float | None = None
    register_exit_hook: bool = True


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
