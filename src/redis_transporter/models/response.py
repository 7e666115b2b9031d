"""Response returned to the host framework."""

from enum import Enum
from typing import Any

from pydantic import Field

from .base import TransporterBaseModel


class ResponseStatus(str, Enum):
    """Response status."""

    OK = "ok"
    ERROR = "error"


class Response(TransporterBaseModel):
    """Result of a dispatched action.

    ``data`` is a single record, an ordered list of records, or a list of
    ``{"id": ...}`` objects depending on the payload.
    """

    status: ResponseStatus
    data: Any = None
    error: str | None = Field(default=None, description="Human-readable failure reason")

    @classmethod
    def ok(cls, data: Any) -> "Response":
        return cls(status=ResponseStatus.OK, data=data)

    @classmethod
    def fail(cls, message: str) -> "Response":
        return cls(status=ResponseStatus.ERROR, error=message)
