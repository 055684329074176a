"""Snapshot request and response value objects."""

from pydantic import Field

from observatory.domain.analytics.model.value import Alert, EventStatistics, GeoCluster
from observatory.domain.shared.model.record import CanonicalEvent, Category, DerivedMetric
from observatory.domain.shared.model.source import SourceOutcome, SourceResult
from observatory.domain.shared.model.value import UtcDatetime, ValueObject


class SnapshotFilters(ValueObject):
    region: str | None = None  # country code or name, matched canonically
    category: Category | None = None
    limit: int | None = Field(default=None, ge=1)  # events returned, never above the cap


class SnapshotCaps(ValueObject):
    events: int = Field(default=100, ge=0)
    alerts: int = Field(default=50, ge=0)
    clusters: int = Field(default=50, ge=0)
    metrics: int = Field(default=60, ge=0)


class SourceStatus(ValueObject):
    outcome: SourceOutcome
    ok: bool
    events: int = 0
    metrics: int = 0
    http_status: int | None = None
    error: str | None = None
    elapsed_ms: float = 0.0

    @classmethod
    def from_result(cls, result: SourceResult) -> "SourceStatus":
        return cls(
            outcome=result.outcome,
            ok=result.ok,
            events=len(result.events),
            metrics=len(result.metrics),
            http_status=result.http_status,
            error=result.error,
            elapsed_ms=round(result.elapsed_ms, 1),
        )


class AggregatedResult(ValueObject):
    """The single coherent payload returned for one aggregation run."""

    events: list[CanonicalEvent]
    metrics: list[DerivedMetric]
    alerts: list[Alert]
    clusters: list[GeoCluster]
    statistics: EventStatistics
    sources: dict[str, SourceStatus]
    degraded: list[str] = Field(default_factory=list)
    generated_at: UtcDatetime
