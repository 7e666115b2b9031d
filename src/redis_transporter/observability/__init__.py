"""Observability module for structured logging."""

from .logging import get_logger, log_store_call_end, setup_logging

__all__ = [
    "setup_logging",
    "get_logger",
    "log_store_call_end",
]
