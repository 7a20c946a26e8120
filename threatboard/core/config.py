"""
Configuration settings for Threatboard.

This module provides configuration settings loaded from environment variables.
"""

import logging
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import field_validator


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    """
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    # Project info
    PROJECT_NAME: str = "Threatboard"
    VERSION: str = "0.1.0"
    DESCRIPTION: str = "Live threat level dashboard fed by security samples and device location"

    # API settings
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    DEBUG: bool = False

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "data/logs"  # empty disables file logging

    # Bulk fetch
    FETCH_LATENCY_SECONDS: float = 2.0

    # Location stream
    LOCATION_THREAT_LEVEL: int = 10
    LOCATION_UPDATE_INTERVAL_SECONDS: float = 5.0
    LOCATION_AUTHORIZED: bool = True

    # Aggregation
    WARNING_THRESHOLD: int = 50
    WARNING_MESSAGE: str = "High threat level detected!"

    # CORS settings for dashboard clients
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://localhost:3000"]

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure the log level is a known logging level name"""
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator("WARNING_MESSAGE")
    @classmethod
    def validate_warning_message(cls, v: str) -> str:
        if not v:
            raise ValueError("WARNING_MESSAGE must not be empty")
        return v

    @field_validator("FETCH_LATENCY_SECONDS")
    @classmethod
    def validate_fetch_latency(cls, v: float) -> float:
        if v < 0:
            raise ValueError("FETCH_LATENCY_SECONDS must not be negative")
        return v

    @field_validator("LOCATION_UPDATE_INTERVAL_SECONDS")
    @classmethod
    def validate_location_interval(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("LOCATION_UPDATE_INTERVAL_SECONDS must be positive")
        return v


# Create global settings instance
settings = Settings()
