"""Base model configuration for all data structures."""

from pydantic import BaseModel, ConfigDict


class Model(BaseModel):
    """Base model with standard configuration.

    Suites hold arbitrary callables, so arbitrary types are allowed.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)
