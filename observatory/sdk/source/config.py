"""Base configuration for source adapters."""

from pydantic import BaseModel, Field


class SourceConfig(BaseModel):
    """Base configuration for source adapters.

    Extend this class for adapter-specific configuration.
    """

    limit: int = Field(default=30, ge=0)  # Max records the adapter may return
    timeout: float | None = Field(default=None, gt=0)  # Per-call deadline; None = fetcher default
