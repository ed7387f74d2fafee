"""
Process settings.

All configuration is read from the environment (or a local .env file).
"""

import functools

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings shared by the services and the CLI."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    DATABASE_URL: str = "sqlite:///./eventactions.db"
    LOG_LEVEL: str = "INFO"

    # Dispatcher
    EVENTACTIONS_WORKERS: int = Field(3, ge=1)
    EVENTACTIONS_ACTION_TIMEOUT: float = Field(30.0, gt=0)

    # Fernet key for runner secrets at rest (unset = stored as-is)
    EVENTACTIONS_ENCRYPTION_KEY: str | None = None


@functools.lru_cache()
def get_settings() -> Settings:
    """Get settings (cached)."""
    return Settings()
