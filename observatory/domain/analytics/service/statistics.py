"""Group-by counts over the full event set."""

from collections import Counter
from datetime import datetime, timedelta

from observatory.domain.analytics.model.geo import canonical_region
from observatory.domain.analytics.model.value import EventStatistics
from observatory.domain.shared.model.record import CanonicalEvent, Severity

RECENT_WINDOW = timedelta(hours=24)


def compute_statistics(events: list[CanonicalEvent], now: datetime) -> EventStatistics:
    """Counts by category, severity, kind, region, group and source.

    Every severity appears in ``by_severity``, zero or not. Events without a
    region or group are left out of those maps.
    """
    cutoff = now - RECENT_WINDOW
    by_severity = {severity.value: 0 for severity in Severity}
    by_severity.update(Counter(e.severity.value for e in events))

    regions = (canonical_region(e.region) for e in events)
    return EventStatistics(
        total=len(events),
        last_24h=sum(1 for e in events if e.timestamp >= cutoff),
        by_category=dict(Counter(e.category.value for e in events)),
        by_severity=by_severity,
        by_kind=dict(Counter(e.kind for e in events)),
        by_region=dict(Counter(r for r in regions if r)),
        by_group=dict(Counter(e.group for e in events if e.group)),
        by_source=dict(Counter(e.source for e in events)),
    )
