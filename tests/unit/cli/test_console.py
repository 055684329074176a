"""Tests for CLI snapshot rendering."""

from datetime import UTC, datetime, timedelta

import pytest

from observatory.cli.console import Console, relative_time
from observatory.domain.analytics.model.value import EventStatistics
from observatory.domain.report.model.value import AggregatedResult, SourceStatus
from observatory.domain.shared.model.record import CanonicalEvent, Category, Severity
from observatory.domain.shared.model.source import SourceOutcome

NOW = datetime(2024, 6, 1, 12, tzinfo=UTC)


class TestRelativeTime:
    @pytest.mark.parametrize(
        ("delta", "expected"),
        [
            (timedelta(seconds=30), "just now"),
            (timedelta(minutes=1), "1 minute ago"),
            (timedelta(hours=3), "3 hours ago"),
            (timedelta(days=2), "2 days ago"),
            (timedelta(days=30), "2024-05-02 12:00"),
        ],
    )
    def test_buckets(self, delta: timedelta, expected: str) -> None:
        assert relative_time(NOW - delta, NOW) == expected


class TestSnapshotRendering:
    def result(self, events: list[CanonicalEvent]) -> AggregatedResult:
        return AggregatedResult(
            events=events,
            metrics=[],
            alerts=[],
            clusters=[],
            statistics=EventStatistics(total=len(events)),
            sources={
                "urlhaus": SourceStatus(outcome=SourceOutcome.SUCCESS, ok=True, events=len(events)),
                "opensky": SourceStatus(outcome=SourceOutcome.AUTH_ERROR, ok=False, error="token rejected"),
            },
            degraded=["opensky"],
            generated_at=NOW,
        )

    def test_renders_sources_events_and_degraded(self, capsys: pytest.CaptureFixture[str]) -> None:
        event = CanonicalEvent(
            id="URLHAUS-1",
            category=Category.CYBER,
            kind="malware_url",
            severity=Severity.HIGH,
            timestamp=NOW - timedelta(hours=2),
            label="http://bad.example/payload",
            source="URLhaus",
        )

        Console(force_terminal=False).snapshot(self.result([event]))

        out = capsys.readouterr().out
        assert "Sources" in out
        assert "auth_error" in out
        assert "2 hours ago" in out
        assert "Degraded sources: opensky" in out

    def test_no_events_warns(self, capsys: pytest.CaptureFixture[str]) -> None:
        Console(force_terminal=False).snapshot(self.result([]))

        assert "No events matched" in capsys.readouterr().out
