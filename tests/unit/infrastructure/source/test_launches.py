"""Unit tests for the SpaceX and Launch Library 2 adapters."""

from datetime import UTC, datetime

import httpx
import pytest

from observatory.domain.shared.model.record import Category, Severity
from observatory.domain.shared.model.source import SourceOutcome
from observatory.infrastructure.source.launches import (
    LaunchLibraryAdapter,
    LaunchLibraryConfig,
    LL2Launch,
    SpaceXAdapter,
    SpaceXConfig,
    ll2_status,
)

T0 = datetime(2024, 6, 1, 12, tzinfo=UTC)


def spacex_launch(launch_id: str, name: str, date_utc: str, upcoming: bool, success: bool | None = None) -> dict:
    return {
        "id": launch_id,
        "name": name,
        "date_utc": date_utc,
        "upcoming": upcoming,
        "success": success,
        "details": None,
        "rocket": "falcon9",
        "launchpad": "slc40",
        "links": {"webcast": f"https://youtu.be/{launch_id}"},
    }


UPCOMING = [
    spacex_launch("u1", "Starlink 10-1", "2024-06-02T12:00:00.000Z", upcoming=True),
    spacex_launch("u0", "Transporter-11", "2024-06-01T11:00:00.000Z", upcoming=True),
]
PAST = [
    spacex_launch("p1", "CRS-30", "2024-03-21T20:55:00.000Z", upcoming=False, success=True),
    spacex_launch("p2", "Starship IFT-3", "2024-05-01T00:00:00.000Z", upcoming=False, success=False),
]


class TestSpaceXAdapter:
    @pytest.mark.asyncio
    async def test_upcoming_and_recent_past_launches(self, make_context, router):
        handler = router(
            {
                "/v5/launches/upcoming": httpx.Response(200, json=UPCOMING),
                "/v5/launches/past": httpx.Response(200, json=PAST),
                "/v4/rockets": httpx.Response(200, json=[{"id": "falcon9", "name": "Falcon 9 Block 5"}]),
                "/v4/launchpads": httpx.Response(503),
            }
        )
        adapter = SpaceXAdapter.from_context(SpaceXConfig(past=1), make_context(handler))

        result = await adapter.fetch()

        assert result.ok
        assert [e.id for e in result.events] == ["SPACEX-u1", "SPACEX-u0", "SPACEX-p2"]
        upcoming, live, failed = result.events

        assert upcoming.category is Category.SPACE
        assert upcoming.kind == "launch"
        assert upcoming.label == "Starlink 10-1 (Falcon 9 Block 5)"
        assert upcoming.severity is Severity.LOW
        assert upcoming.timestamp == T0
        assert upcoming.indicator == "https://youtu.be/u1"
        assert upcoming.metadata["net"] == "2024-06-02T12:00:00+00:00"
        assert upcoming.metadata["countdown_s"] == 86_400
        assert upcoming.metadata["pad"] == "Unknown pad"

        assert live.metadata["status"] == "live"
        assert live.severity is Severity.MEDIUM
        assert live.metadata["countdown_s"] is None

        assert failed.metadata["status"] == "failure"
        assert failed.severity is Severity.HIGH
        assert failed.timestamp == datetime(2024, 5, 1, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_failed_upcoming_call_fails_source(self, make_context, router):
        handler = router({"/v5/launches/past": httpx.Response(200, json=PAST)})
        adapter = SpaceXAdapter.from_context(SpaceXConfig(), make_context(handler))

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.HTTP_ERROR
        assert result.http_status == 404


LL2_BODY = {
    "count": 3,
    "results": [
        {
            "id": "a",
            "name": "Long March 5 | Chang'e 7",
            "net": "2024-06-03T00:00:00Z",
            "status": {"id": 1, "name": "Go for Launch", "abbrev": "Go"},
            "launch_service_provider": {"name": "China Aerospace Science and Technology Corporation", "abbrev": "CASC"},
            "rocket": {"configuration": {"name": "Long March 5"}},
            "mission": {"name": "Chang'e 7", "description": "Lunar south pole lander", "type": "Planetary"},
            "pad": {"name": "LC-101", "location": {"name": "Wenchang", "country_code": "CHN"}},
            "webcast_live": False,
            "vidURLs": [{"url": "https://example.test/stream"}],
        },
        {
            "id": "b",
            "name": "Falcon 9 | Starlink",
            "net": "2024-06-02T00:00:00Z",
            "status": {"abbrev": "Go"},
            "launch_service_provider": {"name": "SpaceX", "abbrev": "SpX"},
        },
        {
            "id": "c",
            "name": "Electron | Test flight",
            "net": "2024-05-30T00:00:00Z",
            "status": {"abbrev": "Failure"},
        },
    ],
}


class TestLaunchLibraryAdapter:
    @pytest.mark.asyncio
    async def test_launches_skip_spacex_duplicates(self, make_context):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json=LL2_BODY)

        adapter = LaunchLibraryAdapter.from_context(LaunchLibraryConfig(), make_context(handler))

        result = await adapter.fetch()

        assert result.ok
        assert seen[0].url.params["mode"] == "normal"
        assert [e.id for e in result.events] == ["LL2-a", "LL2-c"]
        change, electron = result.events

        assert change.label == "Chang'e 7 (Long March 5)"
        assert change.region == "CHN"
        assert change.group == "CASC"
        assert change.metadata["pad"] == "LC-101, Wenchang"
        assert change.metadata["details"] == "Lunar south pole lander"
        assert change.indicator == "https://example.test/stream"

        assert electron.label == "Electron | Test flight (Unknown rocket)"
        assert electron.group == "Unknown"
        assert electron.severity is Severity.HIGH
        assert electron.timestamp == datetime(2024, 5, 30, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_rate_limited_is_http_error(self, make_context):
        adapter = LaunchLibraryAdapter.from_context(
            LaunchLibraryConfig(), make_context(lambda r: httpx.Response(429))
        )

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.HTTP_ERROR

    @pytest.mark.parametrize(
        ("status", "webcast_live", "expected"),
        [
            ("Go", False, "upcoming"),
            ("TBD", True, "tbd"),
            ("Success", False, "success"),
            ("In Flight", True, "live"),
            ("Hold", False, "tbd"),
        ],
    )
    def test_status_mapping(self, status, webcast_live, expected):
        launch = LL2Launch.model_validate(
            {"id": "x", "name": "x", "status": {"abbrev": status}, "webcast_live": webcast_live}
        )

        assert ll2_status(launch) == expected
