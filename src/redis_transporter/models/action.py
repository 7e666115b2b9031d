"""Action and payload models.

The payload is a tagged union decided once at dispatch entry: a payload
with ``id`` is an ``IdsQuery``, one with ``pattern`` is a ``PatternQuery``.
"""

from enum import Enum
from typing import Annotated, Any, Union

from pydantic import ConfigDict, Discriminator, Field, Tag, TypeAdapter, field_validator

from .base import TransporterBaseModel
from .options import TransporterOptions


class ActionType(str, Enum):
    """Action types the transporter serves."""

    GET = "GET"


class IdsQuery(TransporterBaseModel):
    """Fetch one record or an ordered list of records by id."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str | None = Field(default=None, min_length=1, description="Record type")
    id: str | list[str] = Field(description="Single id or ordered list of ids")

    @field_validator("id")
    @classmethod
    def validate_ids(cls, v: str | list[str]) -> str | list[str]:
        ids = [v] if isinstance(v, str) else v
        if any(not record_id for record_id in ids):
            raise ValueError("ids must be non-empty strings")
        return v

    @property
    def is_single(self) -> bool:
        return isinstance(self.id, str)

    @property
    def ids(self) -> list[str]:
        return [self.id] if isinstance(self.id, str) else list(self.id)


class PatternQuery(TransporterBaseModel):
    """Enumerate records whose key starts with a pattern."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    pattern: str = Field(description="Key pattern after the prefix")
    type: str | None = Field(default=None, min_length=1, description="Record type")
    only_ids: bool = Field(default=False, alias="onlyIds", description="Return ids only")


def _payload_kind(value: Any) -> str | None:
    if isinstance(value, dict):
        if value.get("id") is not None:
            return "ids"
        if value.get("pattern") is not None:
            return "pattern"
        return None
    if isinstance(value, IdsQuery):
        return "ids"
    if isinstance(value, PatternQuery):
        return "pattern"
    return None


Payload = Annotated[
    Union[
        Annotated[IdsQuery, Tag("ids")],
        Annotated[PatternQuery, Tag("pattern")],
    ],
    Discriminator(
        _payload_kind,
        custom_error_type="invalid_payload",
        custom_error_message="payload needs an id or a pattern",
    ),
]

payload_adapter: TypeAdapter[IdsQuery | PatternQuery] = TypeAdapter(Payload)


class ActionMeta(TransporterBaseModel):
    """Action metadata. Only ``options`` is read."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    options: TransporterOptions | None = None


class Action(TransporterBaseModel):
    """Request coming from the host framework.

    ``payload`` stays a plain mapping here so an unsupported action type is
    reported before its payload is validated.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str
    payload: dict[str, Any] = Field(default_factory=dict)
    meta: ActionMeta = Field(default_factory=ActionMeta)
