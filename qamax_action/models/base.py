"""Base model configuration for all wire and domain models."""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict


def _number_to_str(value: Any) -> Any:
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return value


Identifier = Annotated[str, BeforeValidator(_number_to_str)]
"""Service-assigned ID, sent as a number or a string and kept as a string."""


class Model(BaseModel):
    """Base model with standard configuration.

    Unknown keys sent by the service are ignored.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")
