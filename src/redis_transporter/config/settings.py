"""Configuration management with Pydantic Settings.

Environment variables are loaded from:
1. Environment variables (highest priority)
2. .env file (development)
3. Defaults (lowest priority)

These are process-wide defaults only. Per-call connection options are
validated separately by ``redis_transporter.models.TransporterOptions``.
"""

from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Idle milliseconds before an unused connection is closed
DEFAULT_CONNECTION_TIMEOUT = 60_000.0


class LogLevel(str, Enum):
    """Logging level."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Logging format."""

    JSON = "json"
    TEXT = "text"


class Settings(BaseSettings):
    """Transporter settings.

    All settings can be overridden via environment variables prefixed with
    ``REDIS_TRANSPORTER_`` (e.g., ``REDIS_TRANSPORTER_LOG_LEVEL``).
    """

    model_config = SettingsConfigDict(
        env_prefix="REDIS_TRANSPORTER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="redis-transporter", description="Logger service name")

    # Logging configuration
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")
    log_format: LogFormat = Field(default=LogFormat.JSON, description="Logging format")

    # Connection defaults
    default_uri: str = Field(
        default="redis://localhost:6379",
        description="Redis URL used when options carry neither uri nor host",
    )
    default_connection_timeout: float = Field(
        default=DEFAULT_CONNECTION_TIMEOUT,
        description="Idle milliseconds before auto-disconnect",
    )

    @field_validator("default_connection_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Reject non-positive idle timeouts."""
        if v <= 0:
            raise ValueError("default_connection_timeout must be positive")
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses LRU cache to avoid re-parsing environment variables.
    """
    return Settings()
