"""Adapter registry - typed container for registered source adapters."""

from collections.abc import Iterator

from observatory.sdk.source.source import SourceAdapter


class AdapterRegistry:
    """Registry of source adapters, keyed by source id, in registration order."""

    def __init__(self, adapters: list[SourceAdapter]) -> None:
        self._adapters: dict[str, SourceAdapter] = {}
        for adapter in adapters:
            if adapter.source_id in self._adapters:
                raise ValueError(f"Duplicate source id: {adapter.source_id}")
            self._adapters[adapter.source_id] = adapter

    def get(self, source_id: str) -> SourceAdapter | None:
        """Get an adapter by source id."""
        return self._adapters.get(source_id)

    def __contains__(self, source_id: str) -> bool:
        return source_id in self._adapters

    def __iter__(self) -> Iterator[SourceAdapter]:
        return iter(self._adapters.values())

    def __len__(self) -> int:
        return len(self._adapters)

    def names(self) -> list[str]:
        """List all registered source ids."""
        return list(self._adapters.keys())
