"""Alert synthesis from events and metrics."""

from observatory.domain.analytics.model.thresholds import (
    EVENT_ALERT_KINDS,
    METRIC_THRESHOLDS,
    ThresholdRule,
)
from observatory.domain.analytics.model.value import Alert, AlertOrigin
from observatory.domain.shared.model.record import CanonicalEvent, DerivedMetric, Severity


def event_alerts(
    events: list[CanonicalEvent],
    kinds: dict[str, Severity] = EVENT_ALERT_KINDS,
) -> list[Alert]:
    """Alert on every event of an alerting kind at or above its minimum severity."""
    alerts = []
    for event in events:
        minimum = kinds.get(event.kind)
        if minimum is None or not event.severity.at_least(minimum):
            continue
        alerts.append(
            Alert(
                id=f"ALERT-{event.id}",
                origin=AlertOrigin.EVENT,
                origin_id=event.id,
                kind=event.kind,
                severity=event.severity,
                title=event.label,
                message=str(event.metadata.get("description") or event.label),
                subject=event.indicator or event.region or "",
                source=event.source,
                timestamp=event.timestamp,
            )
        )
    return alerts


def metric_alerts(
    metrics: list[DerivedMetric],
    rules: dict[str, ThresholdRule] = METRIC_THRESHOLDS,
) -> list[Alert]:
    """One alert per metric whose value breaches a band of its rule."""
    alerts = []
    for metric in metrics:
        rule = rules.get(metric.kind)
        band = rule.breach(metric.value) if rule else None
        if rule is None or band is None:
            continue
        shown = f"{metric.value:g}{metric.unit}"
        comparison = "|value| " if rule.absolute else ""
        alerts.append(
            Alert(
                id=f"ALERT-{metric.id}",
                origin=AlertOrigin.METRIC,
                origin_id=metric.id,
                kind=metric.kind,
                severity=band.severity,
                title=f"{rule.title}: {metric.label}",
                message=f"{metric.label} at {shown} ({comparison}{band.describe()})",
                subject=metric.label,
                value=metric.value,
                source=metric.source,
                timestamp=metric.timestamp,
            )
        )
    return alerts


def rank_alerts(alerts: list[Alert]) -> list[Alert]:
    """Same ordering as events: most severe, then most recent; stable."""
    return sorted(alerts, key=lambda a: (a.severity.rank, -a.timestamp.timestamp()))
