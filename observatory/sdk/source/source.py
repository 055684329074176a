"""Source adapter protocol for pluggable providers."""

from typing import ClassVar, Protocol

from pydantic import BaseModel

from observatory.domain.shared.model.source import SourceResult


class SourceAdapter(Protocol):
    """Protocol for per-provider adapters.

    Class attributes:
        name: Unique identifier for this adapter type (e.g., 'urlhaus').
        config_class: Pydantic model for validating configuration.

    Instances expose ``source_id``, which equals ``name`` unless the same
    adapter type is registered more than once (e.g. one status page each).
    """

    name: ClassVar[str]
    config_class: ClassVar[type[BaseModel]]

    @property
    def source_id(self) -> str: ...

    async def fetch(self) -> SourceResult:
        """Fetch, validate, normalize and classify one snapshot from the provider.

        Must never raise: every failure is reported as a typed SourceResult.
        """
        ...
