"""Geo-clustering of events by canonical country."""

import logging
import random
from dataclasses import dataclass, field
from datetime import datetime

from observatory.domain.analytics.model.geo import (
    COUNTRY_COORDINATES,
    FALLBACK_KINDS,
    JITTER_DEGREES,
    canonical_region,
    region_label,
)
from observatory.domain.analytics.model.value import GeoCluster
from observatory.domain.shared.model.record import CanonicalEvent, Severity

logger = logging.getLogger(__name__)


@dataclass
class _Bucket:
    members: list[CanonicalEvent] = field(default_factory=list)

    @property
    def latest(self) -> datetime:
        return max(e.timestamp for e in self.members)


class GeoClusterer:
    """Groups events sharing a canonical region into one marker.

    Regions missing from the coordinate table are dropped, except for event
    kinds that always need a marker: those get a random, flagged coordinate.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def cluster(self, events: list[CanonicalEvent]) -> list[GeoCluster]:
        buckets: dict[str, _Bucket] = {}
        dropped = 0
        for event in events:
            key = canonical_region(event.region)
            if key is None:
                continue
            if key not in COUNTRY_COORDINATES and event.kind not in FALLBACK_KINDS:
                dropped += 1
                continue
            buckets.setdefault(key, _Bucket()).members.append(event)

        if dropped:
            logger.debug("Dropped %d events with regions outside the coordinate table", dropped)

        clusters = [self._build(key, bucket) for key, bucket in buckets.items()]
        return sorted(clusters, key=lambda c: (c.severity.rank, -c.member_count, -c.latest.timestamp()))

    def _build(self, key: str, bucket: _Bucket) -> GeoCluster:
        known = COUNTRY_COORDINATES.get(key)
        if known is not None:
            _, lat, lng = known
            lat, lng = lat + self._jitter(), lng + self._jitter()
        else:
            lat = (self._rng.random() - 0.5) * 100
            lng = (self._rng.random() - 0.5) * 200

        members = bucket.members
        count = len(members)
        return GeoCluster(
            key=key,
            label=f"{region_label(key)}: {count} {'event' if count == 1 else 'events'}",
            latitude=round(lat, 4),
            longitude=round(lng, 4),
            member_count=count,
            severity=Severity.max([e.severity for e in members]),
            latest=bucket.latest,
            sources=sorted({e.source for e in members}),
            approximate=known is None,
        )

    def _jitter(self) -> float:
        return (self._rng.random() - 0.5) * JITTER_DEGREES
