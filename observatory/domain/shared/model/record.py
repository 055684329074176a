"""Canonical record types shared by adapters, analytics and the assembled snapshot."""

from enum import StrEnum
from typing import Any

from pydantic import Field, field_serializer

from observatory.domain.shared.model.value import UtcDatetime, ValueObject


class Severity(StrEnum):
    """Ordinal severity. Lower rank sorts first: critical < high < medium < low."""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]

    def at_least(self, other: "Severity") -> bool:
        """True if this severity is as severe as ``other`` or more."""
        return self.rank <= other.rank

    @classmethod
    def max(cls, severities: "list[Severity] | tuple[Severity, ...]") -> "Severity":
        """Most severe of the given severities.

        Raises:
            ValueError: If no severities are given.
        """
        if not severities:
            raise ValueError("Severity.max() requires at least one severity")
        return min(severities, key=lambda s: s.rank)


_SEVERITY_RANK: dict[Severity, int] = {
    Severity.CRITICAL: 0,
    Severity.HIGH: 1,
    Severity.MEDIUM: 2,
    Severity.LOW: 3,
}


class Category(StrEnum):
    CYBER = "cyber"
    INFRASTRUCTURE = "infrastructure"
    SPACE = "space"
    AVIATION = "aviation"
    FINANCE = "finance"
    INTEL = "intel"


class MetricStatus(StrEnum):
    """Threshold class of a derived metric."""

    NORMAL = "normal"
    WARNING = "warning"
    CRITICAL = "critical"


class CanonicalEvent(ValueObject):
    """The universal normalized unit emitted by source adapters.

    ``metadata`` carries provider-specific fields for category-specific
    rendering. Ranking, statistics and clustering only read the typed fields.
    """

    id: str  # "<SOURCE>-<nativeId>"
    category: Category
    kind: str  # e.g. "ransomware", "outage", "solar_flare"
    severity: Severity
    timestamp: UtcDatetime
    label: str
    indicator: str = ""
    source: str
    region: str | None = None  # geography key as reported (country code or name)
    group: str | None = None  # actor/family grouping key
    tags: frozenset[str] = frozenset()
    metadata: dict[str, Any] = Field(default_factory=dict)

    @field_serializer("tags")
    def _serialize_tags(self, tags: frozenset[str]) -> list[str]:
        return sorted(tags)


class DerivedMetric(ValueObject):
    """A single scalar KPI, from a provider scalar or from event collections."""

    id: str
    kind: str  # key into the metric threshold table
    label: str
    value: float
    unit: str = ""
    status: MetricStatus = MetricStatus.NORMAL
    category: Category
    source: str
    timestamp: UtcDatetime


def event_sort_key(event: CanonicalEvent) -> tuple[int, float]:
    """Severity first, then most recent first."""
    return (event.severity.rank, -event.timestamp.timestamp())
