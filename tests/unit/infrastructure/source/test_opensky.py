"""Unit tests for the OpenSky adapter and its token handling."""

import httpx
import pytest

from observatory.domain.shared.model.record import Category, Severity
from observatory.domain.shared.model.source import SourceOutcome
from observatory.infrastructure.auth.token_cache import ClientCredentials, OAuth2TokenCache
from observatory.infrastructure.source.opensky import (
    Aircraft,
    OpenSkyAdapter,
    OpenSkyConfig,
    is_military,
    is_military_callsign,
)

TOKEN_URL = "https://auth.example.test/token"


def state(icao24, callsign, country, *, lat=50.0, lng=8.0, on_ground=False, geo_alt=10000.0, category=0):
    return [icao24, callsign, country, 1717243000, 1717243190, lng, lat, 9000.0, on_ground,
            230.0, 90.0, 0.0, None, geo_alt, "1000", False, 0, category]  # fmt: skip


STATES = {
    "time": 1717243200,
    "states": [
        state("ae1234", "RCH123  ", "United States", geo_alt=12500.0),
        state("3c6444", "DLH400  ", "Germany"),
        state("43c123", "ASCOT12 ", "United Kingdom", on_ground=True),
        state("abcdef", "N123AB  ", "United States", lat=None, lng=None),
        state("ae9999", "        ", "United States", category=14),
    ],
}


class OpenSkyApi:
    """Token endpoint plus a states endpoint that can be told to reject tokens."""

    def __init__(self) -> None:
        self.tokens_issued = 0
        self.reject_next = False
        self.seen_tokens: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.path == "/token":
            self.tokens_issued += 1
            return httpx.Response(200, json={"access_token": f"token-{self.tokens_issued}", "expires_in": 1800})
        self.seen_tokens.append(request.headers.get("authorization", ""))
        if self.reject_next:
            self.reject_next = False
            return httpx.Response(401)
        return httpx.Response(200, json=STATES)


def make_adapter(make_context, api, credentials=ClientCredentials("id", "secret"), **config):
    context = make_context(api)
    tokens = OAuth2TokenCache(TOKEN_URL, credentials, context.fetcher, context.clock)
    context = make_context(api, opensky=tokens)
    return OpenSkyAdapter.from_context(OpenSkyConfig(**config), context)


class TestMilitaryDetection:
    def test_callsign_prefixes(self):
        assert is_military_callsign("RCH123")
        assert is_military_callsign(" navy7 ")
        assert not is_military_callsign("DLH400")
        assert not is_military_callsign(None)

    def test_uav_category_counts_as_military(self):
        assert is_military(Aircraft(icao24="x", category=14))
        assert not is_military(Aircraft(icao24="y", category=1))


class TestOpenSkyAdapter:
    @pytest.mark.asyncio
    async def test_counts_and_military_events(self, make_context):
        api = OpenSkyApi()
        adapter = make_adapter(make_context, api)

        result = await adapter.fetch()

        assert result.ok
        assert api.seen_tokens == ["Bearer token-1"]
        values = {m.kind: m.value for m in result.metrics}
        assert values == {
            "aircraft_tracked": 4.0,
            "aircraft_airborne": 3.0,
            "aircraft_military": 3.0,
            "aircraft_high_altitude": 1.0,
        }
        assert [e.id for e in result.events] == ["OPENSKY-ae1234", "OPENSKY-43c123", "OPENSKY-ae9999"]
        event = result.events[0]
        assert event.category is Category.AVIATION
        assert event.kind == "military_aircraft"
        assert event.severity is Severity.MEDIUM
        assert event.region == "United States"
        assert event.label == "Military aircraft RCH123"
        assert result.events[2].label == "Military aircraft AE9999"

    @pytest.mark.asyncio
    async def test_token_reused_across_snapshots(self, make_context):
        api = OpenSkyApi()
        adapter = make_adapter(make_context, api)

        await adapter.fetch()
        await adapter.fetch()

        assert api.tokens_issued == 1

    @pytest.mark.asyncio
    async def test_401_forces_fresh_exchange_on_next_call(self, make_context):
        api = OpenSkyApi()
        adapter = make_adapter(make_context, api)
        await adapter.fetch()

        api.reject_next = True
        rejected = await adapter.fetch()
        recovered = await adapter.fetch()

        assert rejected.outcome is SourceOutcome.AUTH_ERROR
        assert recovered.ok
        assert api.tokens_issued == 2
        assert api.seen_tokens[-1] == "Bearer token-2"

    @pytest.mark.asyncio
    async def test_missing_credentials_degrades_only_this_source(self, make_context):
        api = OpenSkyApi()
        adapter = make_adapter(make_context, api, credentials=None)

        result = await adapter.fetch()

        assert result.outcome is SourceOutcome.CONFIG_ERROR
        assert api.seen_tokens == []

    @pytest.mark.asyncio
    async def test_anonymous_access_when_allowed(self, make_context):
        api = OpenSkyApi()
        adapter = make_adapter(make_context, api, credentials=None, allow_anonymous=True)

        result = await adapter.fetch()

        assert result.ok
        assert api.seen_tokens == [""]
