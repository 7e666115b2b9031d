"""Configuration management module.

This module provides:
- Environment-based defaults with validation
- Cached settings access via get_settings()
"""

from .settings import (
    DEFAULT_CONNECTION_TIMEOUT,
    LogFormat,
    LogLevel,
    Settings,
    get_settings,
)

__all__ = [
    "DEFAULT_CONNECTION_TIMEOUT",
    "Settings",
    "get_settings",
    "LogLevel",
    "LogFormat",
]
