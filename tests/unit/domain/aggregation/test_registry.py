"""Unit tests for AdapterRegistry."""

from unittest.mock import MagicMock

import pytest

from observatory.domain.aggregation.model.registry import AdapterRegistry


def adapter(source_id: str) -> MagicMock:
    mock = MagicMock()
    mock.source_id = source_id
    return mock


class TestAdapterRegistry:
    def test_preserves_registration_order(self):
        registry = AdapterRegistry([adapter("b"), adapter("a"), adapter("c")])

        assert registry.names() == ["b", "a", "c"]
        assert [a.source_id for a in registry] == ["b", "a", "c"]
        assert len(registry) == 3

    def test_lookup(self):
        a = adapter("a")
        registry = AdapterRegistry([a])

        assert registry.get("a") is a
        assert registry.get("missing") is None
        assert "a" in registry

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError, match="Duplicate source id"):
            AdapterRegistry([adapter("a"), adapter("a")])
