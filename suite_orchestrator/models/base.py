"""Base model configuration for all data structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model with standard configuration.

    Unknown fields are rejected so that typos in loaded configuration surface
    as validation errors instead of being silently ignored.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")
