"""Data models for the Redis transporter.

All models follow these conventions:
- Field names: lowercase snake_case, camelCase aliases where the host sends them
- Enums: uppercase SNAKE_CASE
"""

from .action import (
    Action,
    ActionMeta,
    ActionType,
    IdsQuery,
    Payload,
    PatternQuery,
    payload_adapter,
)
from .base import TransporterBaseModel
from .options import RedisOptions, TransporterOptions
from .response import Response, ResponseStatus

__all__ = [
    # Base
    "TransporterBaseModel",
    # Options
    "RedisOptions",
    "TransporterOptions",
    # Actions
    "Action",
    "ActionMeta",
    "ActionType",
    "IdsQuery",
    "PatternQuery",
    "Payload",
    "payload_adapter",
    # Responses
    "Response",
    "ResponseStatus",
]
