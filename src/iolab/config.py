"""Configuration management for the oligopoly laboratory."""

from functools import lru_cache
from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False
    )

    # App info
    app_name: str = Field(default="Oligopoly Laboratory")
    version: str = Field(default="0.1.0")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)

    # Persistence
    database_url: str = Field(
        default="sqlite:///./iolab.db",
        description="Database connection URL for finished game snapshots",
    )
    persist_results: bool = Field(default=True)

    # API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000, ge=1, le=65535)
    cors_origins: List[str] = Field(default=["*"])

    # Game limits
    max_rounds: int = Field(default=1000, ge=1, le=10000)
    max_firms: int = Field(default=10, ge=2, le=10)
    max_replications: int = Field(default=100, ge=1, le=1000)

    # Pacing between game steps (seconds)
    round_delay_seconds: float = Field(default=0.0, ge=0.0)
    replication_delay_seconds: float = Field(default=0.0, ge=0.0)
    message_delay_seconds: float = Field(default=0.0, ge=0.0)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


def reload_settings() -> Settings:
    """Reload settings (clears cache)."""
    get_settings.cache_clear()
    return get_settings()
