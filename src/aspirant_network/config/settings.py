"""
Configuration settings for the Aspirant Network client.

This module handles environment variable loading and configuration management
using Pydantic for validation and type safety.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Client configuration settings.

    All settings can be overridden via environment variables prefixed with
    ``ASPIRANT_`` (e.g. ``ASPIRANT_API_BASE_URL``).
    """

    model_config = SettingsConfigDict(
        env_prefix="ASPIRANT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Backend API Configuration
    api_base_url: str = Field(
        default="http://localhost:5000/api",
        description="Base URL for the Aspirant Network REST API"
    )
    api_timeout: int = Field(
        default=30,
        description="Timeout in seconds for API requests"
    )
    api_retries: int = Field(
        default=3,
        description="Retry attempts for idempotent (GET) requests"
    )

    # Local session storage
    storage_path: Path = Field(
        default=Path.home() / ".aspirant_network" / "session.json",
        description="JSON file backing the persistent session store"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="text",
        description="Logging format (json or text)"
    )
    debug_mode: bool = Field(
        default=True,
        description="Enable debug mode"
    )
    log_file: Path = Field(
        default=Path("logs") / "aspirant_network.log",
        description="Rotating log file, written only outside debug mode"
    )

    # Paging
    default_page_size: int = Field(
        default=20,
        description="Default page size for list queries"
    )
    max_page_size: int = Field(
        default=100,
        description="Maximum page size for list queries"
    )

    @field_validator("log_level")
    @classmethod
    def normalise_log_level(cls, value: str) -> str:
        return value.upper()

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Returns:
        Settings: Configured settings instance
    """
    return Settings()
