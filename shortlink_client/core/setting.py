"""
Configuration Settings

This module defines client configuration using Pydantic Settings.
All configuration is loaded from environment variables or .env file.

Design Decisions:
- Uses pydantic-settings for type-safe configuration
- Defaults point at a shortening service running on localhost:5000
- Batch size limit and request timeout are configurable per deployment
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "settings"]


class Settings(BaseSettings):
    """
    Client settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Remote Service Configuration
    BACKEND_BASE_URL: str = Field(
        default="http://localhost:5000",
        description="Base URL of the shortening/statistics service"
    )
    REQUEST_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for a single outbound request"
    )

    # Batch Configuration
    MAX_DRAFTS: int = Field(
        default=5,
        ge=1,
        description="Maximum number of URLs that can be drafted in one batch"
    )

    # Logging Configuration
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Use JSON format for log lines"
    )


settings = Settings()
