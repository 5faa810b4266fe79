"""Configuration for the dashboard collectors and scripts."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="DASHBOARD_ENGINE_", env_file=".env", case_sensitive=True)

    DEBUG: bool = False

    # Collector pre-filters
    STALE_AFTER_DAYS: float = 5.0
    PENDING_AFTER_DAYS: float = 3.0

    # Output
    JSON_INDENT: int = 2


@lru_cache()
def get_settings() -> Settings:
    return Settings()
