"""Derived analytics value objects."""

from datetime import datetime
from enum import StrEnum

from pydantic import Field

from observatory.domain.shared.model.record import CanonicalEvent, DerivedMetric, Severity
from observatory.domain.shared.model.value import UtcDatetime, ValueObject


class AlertOrigin(StrEnum):
    EVENT = "event"
    METRIC = "metric"


class Alert(ValueObject):
    """Something an operator should look at now.

    For metric alerts ``severity`` comes from the threshold band, not from the
    metric's own status.
    """

    id: str
    origin: AlertOrigin
    origin_id: str
    kind: str
    severity: Severity
    title: str
    message: str
    subject: str = ""
    value: float | None = None  # metric alerts only
    source: str
    timestamp: UtcDatetime


class GeoCluster(ValueObject):
    key: str  # canonical region code
    label: str
    latitude: float
    longitude: float
    member_count: int
    severity: Severity
    latest: UtcDatetime
    sources: list[str] = Field(default_factory=list)
    approximate: bool = False  # centroid is a random fallback


class EventStatistics(ValueObject):
    total: int = 0
    last_24h: int = 0
    by_category: dict[str, int] = Field(default_factory=dict)
    by_severity: dict[str, int] = Field(default_factory=dict)
    by_kind: dict[str, int] = Field(default_factory=dict)
    by_region: dict[str, int] = Field(default_factory=dict)
    by_group: dict[str, int] = Field(default_factory=dict)
    by_source: dict[str, int] = Field(default_factory=dict)


class Analysis(ValueObject):
    """Uncapped output of the analytics stage, computed from the full filtered set."""

    events: list[CanonicalEvent]  # deduplicated and ranked
    metrics: list[DerivedMetric]  # provider and event-derived, status assigned
    alerts: list[Alert]  # ranked
    clusters: list[GeoCluster]  # ranked
    statistics: EventStatistics
    computed_at: datetime
