"""Base models for common InfraScope data structures."""

from pydantic import BaseModel, ConfigDict


class InfraScopeModel(BaseModel):
    """Base model for all InfraScope data structures.

    Models are frozen: snapshots are replaced, never edited in place.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)
