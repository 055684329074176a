"""Metrics computed from event collections, and status assignment for all metrics."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from observatory.domain.analytics.model.thresholds import METRIC_THRESHOLDS, ThresholdRule
from observatory.domain.shared.model.record import (
    CanonicalEvent,
    Category,
    DerivedMetric,
    MetricStatus,
    Severity,
)

EventPredicate = Callable[[CanonicalEvent, datetime], bool]


@dataclass(frozen=True)
class EventMetricDefinition:
    kind: str
    label: str
    category: Category
    counts: EventPredicate


def _of_kind(kind: str) -> EventPredicate:
    return lambda event, now: event.kind == kind


def _recent_ransomware(event: CanonicalEvent, now: datetime) -> bool:
    return event.kind == "ransomware" and event.timestamp >= now - timedelta(hours=24)


def _critical_outage(event: CanonicalEvent, now: datetime) -> bool:
    return event.kind == "outage" and event.severity is Severity.CRITICAL


def _service_down(event: CanonicalEvent, now: datetime) -> bool:
    # major (high) and critical Statuspage indicators count as down
    return event.kind == "service_degradation" and event.severity.at_least(Severity.HIGH)


EVENT_METRICS: tuple[EventMetricDefinition, ...] = (
    EventMetricDefinition("malware_urls_active", "Active Malware URLs", Category.CYBER, _of_kind("malware_url")),
    EventMetricDefinition("ransomware_victims_24h", "Ransomware Victims (24h)", Category.CYBER, _recent_ransomware),
    EventMetricDefinition("botnet_c2_tracked", "Botnet C2 Servers", Category.CYBER, _of_kind("botnet_c2")),
    EventMetricDefinition("net_outages", "Internet Outages", Category.INFRASTRUCTURE, _of_kind("outage")),
    EventMetricDefinition("critical_outages", "Critical Outages", Category.INFRASTRUCTURE, _critical_outage),
    EventMetricDefinition("services_down", "Services Down", Category.INFRASTRUCTURE, _service_down),
)


def event_metrics(
    events: list[CanonicalEvent],
    now: datetime,
    category: Category | None = None,
) -> list[DerivedMetric]:
    """One metric per definition, restricted to ``category`` when given."""
    return [
        DerivedMetric(
            id=f"DERIVED-{definition.kind}",
            kind=definition.kind,
            label=definition.label,
            value=float(sum(1 for e in events if definition.counts(e, now))),
            category=definition.category,
            source="derived",
            timestamp=now,
        )
        for definition in EVENT_METRICS
        if category is None or definition.category is category
    ]


def classify(
    metric: DerivedMetric,
    rules: dict[str, ThresholdRule] = METRIC_THRESHOLDS,
) -> DerivedMetric:
    """Return the metric with its status set from the threshold table."""
    rule = rules.get(metric.kind)
    status = rule.status(metric.value) if rule else MetricStatus.NORMAL
    if status is metric.status:
        return metric
    return metric.model_copy(update={"status": status})
