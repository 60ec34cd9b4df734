"""Configuration management for vmonkey."""

from functools import lru_cache
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Harness settings loaded from the environment.

    ``MONKEY_NO_DEBUG`` switches failure handling from the interactive
    debugger pause to automatic classification. Any value containing
    "true" (case-insensitive) enables it; every other string leaves the
    harness interactive.
    """

    model_config = SettingsConfigDict(
        env_prefix="MONKEY_",
        env_file=(".env.local", ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    no_debug: bool = False

    # Backoff for the default transient signatures
    capacity_backoff_seconds: float = 60
    unavailable_backoff_seconds: float = 10

    log_level: str = "INFO"

    @field_validator("no_debug", mode="before")
    @classmethod
    def _parse_no_debug(cls, value: Any) -> Any:
        if isinstance(value, str):
            return "true" in value.lower()
        return value


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
