"""Base model configuration for all Pydantic models."""

from pydantic import BaseModel, ConfigDict


class TransporterBaseModel(BaseModel):
    """Base model with common configuration.

    Conventions:
    - Field names are lowercase snake_case
    - camelCase aliases are accepted where the host framework sends them
    """

    model_config = ConfigDict(
        populate_by_name=True,
        use_enum_values=True,
    )
