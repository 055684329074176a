"""Unit tests for deduplication and ranking."""

from datetime import UTC, datetime, timedelta

from observatory.domain.analytics.service.ranking import dedup, rank, title_key
from observatory.domain.shared.model.record import CanonicalEvent, Category, Severity

T0 = datetime(2024, 6, 1, 10, tzinfo=UTC)


def event(event_id: str, severity: Severity = Severity.LOW, timestamp: datetime = T0, kind: str = "test", label: str | None = None):
    return CanonicalEvent(
        id=event_id,
        category=Category.CYBER,
        kind=kind,
        severity=severity,
        timestamp=timestamp,
        label=label or event_id,
        source="test",
    )


class TestRank:
    def test_worked_example(self):
        """Two criticals at T0 then a high at T1 > T0."""
        events = [
            event("A-1", Severity.CRITICAL, T0),
            event("A-2", Severity.CRITICAL, T0),
            event("C-1", Severity.HIGH, T0 + timedelta(hours=1)),
        ]

        ranked = rank(list(reversed(events)))

        assert [(e.severity, e.timestamp) for e in ranked] == [
            (Severity.CRITICAL, T0),
            (Severity.CRITICAL, T0),
            (Severity.HIGH, T0 + timedelta(hours=1)),
        ]

    def test_stable_for_equal_keys(self):
        events = [event(f"E-{i}", Severity.MEDIUM, T0) for i in range(6)]

        assert [e.id for e in rank(events)] == [f"E-{i}" for i in range(6)]

    def test_recent_first_within_severity(self):
        older = event("old", Severity.HIGH, T0)
        newer = event("new", Severity.HIGH, T0 + timedelta(minutes=5))

        assert [e.id for e in rank([older, newer])] == ["new", "old"]


class TestDedup:
    def test_drops_repeated_ids_first_wins(self):
        first = event("X-1", Severity.LOW)
        again = event("X-1", Severity.CRITICAL)

        assert dedup([first, again]) == [first]

    def test_news_deduplicated_by_headline(self):
        a = event("GDELT-1", kind="news", label="Talks  Collapse in Geneva")
        b = event("HN-9", kind="news", label="talks collapse in geneva")
        other = event("X-1", kind="test", label="talks collapse in geneva")

        assert [e.id for e in dedup([a, b, other])] == ["GDELT-1", "X-1"]

    def test_title_key_ignores_case_and_whitespace(self):
        assert title_key("A  B\tC") == title_key("a b c")
