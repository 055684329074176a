"""Unit tests for GeoClusterer."""

import random
from datetime import UTC, datetime, timedelta

from observatory.domain.analytics.model.geo import COUNTRY_COORDINATES, canonical_region
from observatory.domain.analytics.service.clustering import GeoClusterer
from observatory.domain.shared.model.record import CanonicalEvent, Category, Severity

T0 = datetime(2024, 6, 1, 10, tzinfo=UTC)


def event(event_id: str, region: str | None, severity: Severity = Severity.LOW, kind: str = "ransomware", timestamp=T0):
    return CanonicalEvent(
        id=event_id,
        category=Category.CYBER,
        kind=kind,
        severity=severity,
        timestamp=timestamp,
        label=event_id,
        source="test",
        region=region,
    )


class TestCanonicalRegion:
    def test_aliases(self):
        assert canonical_region("USA") == "US"
        assert canonical_region(" us ") == "US"
        assert canonical_region("United Kingdom") == "GB"
        assert canonical_region("") is None
        assert canonical_region(None) is None


class TestGeoClusterer:
    def test_us_and_usa_share_one_cluster(self):
        clusterer = GeoClusterer(random.Random(7))

        clusters = clusterer.cluster([event("a", "US"), event("b", "USA")])

        assert len(clusters) == 1
        [cluster] = clusters
        assert cluster.key == "US"
        assert cluster.member_count == 2
        assert cluster.label == "United States: 2 events"
        assert not cluster.approximate

    def test_jitter_stays_within_bounds(self):
        _, lat, lng = COUNTRY_COORDINATES["DE"]
        clusterer = GeoClusterer(random.Random(1))

        [cluster] = clusterer.cluster([event("a", "DE")])

        assert abs(cluster.latitude - lat) <= 2.5
        assert abs(cluster.longitude - lng) <= 2.5

    def test_same_seed_same_coordinates(self):
        events = [event("a", "FR")]

        first = GeoClusterer(random.Random(3)).cluster(events)
        second = GeoClusterer(random.Random(3)).cluster(events)

        assert (first[0].latitude, first[0].longitude) == (second[0].latitude, second[0].longitude)

    def test_unknown_region_dropped_unless_outage(self):
        clusterer = GeoClusterer(random.Random(0))

        clusters = clusterer.cluster(
            [
                event("a", "Atlantis"),
                event("b", "Lemuria", kind="outage"),
                event("c", None),
            ]
        )

        [cluster] = clusters
        assert cluster.key == "LEMURIA"
        assert cluster.approximate
        assert -50 <= cluster.latitude <= 50
        assert -100 <= cluster.longitude <= 100

    def test_cluster_severity_is_max_and_clusters_ranked(self):
        clusterer = GeoClusterer(random.Random(0))

        clusters = clusterer.cluster(
            [
                event("a", "DE", Severity.LOW),
                event("b", "DE", Severity.LOW),
                event("c", "FR", Severity.MEDIUM),
                event("d", "FR", Severity.CRITICAL, timestamp=T0 + timedelta(hours=1)),
                event("e", "IT", Severity.CRITICAL),
            ]
        )

        assert [c.key for c in clusters] == ["FR", "IT", "DE"]
        assert clusters[0].severity is Severity.CRITICAL
        assert clusters[0].latest == T0 + timedelta(hours=1)
