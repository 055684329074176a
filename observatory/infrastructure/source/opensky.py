"""OpenSky Network live state vectors, behind an OAuth2 client-credentials token."""

import logging
from typing import Any

from pydantic import BaseModel, Field

from observatory.domain.shared.error import ConfigurationError
from observatory.domain.shared.model.record import (
    CanonicalEvent,
    Category,
    DerivedMetric,
    Severity,
)
from observatory.domain.shared.port.clock import Clock
from observatory.infrastructure.auth.token_cache import OAuth2TokenCache
from observatory.infrastructure.http.fetcher import DeadlineFetcher
from observatory.infrastructure.source.base import HttpSourceAdapter, SourceContext, SourcePayload
from observatory.infrastructure.source.parsing import parse_timestamp
from observatory.sdk.source.config import SourceConfig

logger = logging.getLogger(__name__)

MILITARY_PREFIXES = (
    "RCH", "RRR", "CNV", "NAVY", "USAF", "ARMY", "EVAC", "DUKE", "KING", "PEDRO",
    "JOLLY", "FORTE", "JAKE", "TOPCAT", "HAWK", "VIPER", "COBRA", "ROMAN", "RAIDER",
    "CODY", "DUSTOFF", "RAF", "ASCOT", "NATO", "MMF", "GAF", "IAF", "SNTRY", "AWACS",
    "IRON", "BOMBER", "TANKER", "GIANT", "REACH", "NCHO", "PLF", "CASA", "IAM", "BAF",
    "RNL",
)  # fmt: skip

# Emitter categories: 7 = high performance, 14 = UAV
MILITARY_CATEGORIES = frozenset({7, 14})
HIGH_ALTITUDE_METERS = 12_000


class OpenSkyConfig(SourceConfig):
    limit: int = Field(default=25, ge=0)  # Military aircraft events
    timeout: float | None = Field(default=15.0, gt=0)
    url: str = "https://opensky-network.org/api/states/all"
    allow_anonymous: bool = False  # Query without a token when no credentials are set


class Aircraft(BaseModel):
    icao24: str
    callsign: str | None = None
    origin_country: str = ""
    last_contact: int | None = None
    longitude: float | None = None
    latitude: float | None = None
    baro_altitude: float | None = None
    on_ground: bool = False
    velocity: float | None = None
    true_track: float | None = None
    vertical_rate: float | None = None
    geo_altitude: float | None = None
    squawk: str | None = None
    category: int = 0

    @classmethod
    def from_state(cls, state: list[Any]) -> "Aircraft":
        def at(index: int) -> Any:
            return state[index] if len(state) > index else None

        callsign = at(1)
        return cls(
            icao24=state[0],
            callsign=callsign.strip() or None if isinstance(callsign, str) else None,
            origin_country=at(2) or "",
            last_contact=at(4),
            longitude=at(5),
            latitude=at(6),
            baro_altitude=at(7),
            on_ground=bool(at(8)),
            velocity=at(9),
            true_track=at(10),
            vertical_rate=at(11),
            geo_altitude=at(13),
            squawk=at(14),
            category=at(17) or 0,
        )


class StatesResponse(BaseModel):
    time: int | None = None
    states: list[list[Any]] | None = None


def is_military_callsign(callsign: str | None) -> bool:
    if not callsign:
        return False
    cs = callsign.strip().upper()
    return any(cs.startswith(prefix) or prefix in cs for prefix in MILITARY_PREFIXES)


def is_military(aircraft: Aircraft) -> bool:
    return is_military_callsign(aircraft.callsign) or aircraft.category in MILITARY_CATEGORIES


class OpenSkyAdapter(HttpSourceAdapter[OpenSkyConfig]):
    """Aircraft counts plus military aircraft as events.

    Only positioned aircraft are counted. A 401 on the data call drops the
    cached token so the next snapshot re-authenticates.
    """

    name = "opensky"
    config_class = OpenSkyConfig

    def __init__(
        self,
        config: OpenSkyConfig,
        fetcher: DeadlineFetcher,
        clock: Clock,
        source_id: str | None = None,
        token_cache: OAuth2TokenCache | None = None,
    ) -> None:
        super().__init__(config, fetcher, clock, source_id)
        self._tokens = token_cache

    @classmethod
    def from_context(
        cls,
        config: OpenSkyConfig,
        context: SourceContext,
        source_id: str | None = None,
    ) -> "OpenSkyAdapter":
        token_cache = context.token_caches.get(cls.name)
        return cls(config, context.fetcher, context.clock, source_id, token_cache=token_cache)

    async def collect(self) -> SourcePayload:
        headers = await self._auth_headers()
        body: StatesResponse = await self.get_json(self._config.url, StatesResponse, headers=headers)
        now = self._clock.now()

        aircraft = [
            ac
            for ac in (Aircraft.from_state(state) for state in body.states or [])
            if ac.latitude is not None and ac.longitude is not None
        ]
        military = [ac for ac in aircraft if is_military(ac)]
        airborne = sum(1 for ac in aircraft if not ac.on_ground)
        high_altitude = sum(1 for ac in aircraft if ac.geo_altitude and ac.geo_altitude > HIGH_ALTITUDE_METERS)
        observed = parse_timestamp(body.time, now)

        metrics = [
            self._metric("aircraft_tracked", "Aircraft Tracked", len(aircraft), observed),
            self._metric("aircraft_airborne", "Aircraft Airborne", airborne, observed),
            self._metric("aircraft_military", "Military Aircraft", len(military), observed),
            self._metric("aircraft_high_altitude", "High Altitude Aircraft", high_altitude, observed),
        ]

        events = [
            CanonicalEvent(
                id=f"OPENSKY-{ac.icao24}",
                category=Category.AVIATION,
                kind="military_aircraft",
                severity=Severity.MEDIUM,
                timestamp=parse_timestamp(ac.last_contact, observed),
                label=f"Military aircraft {ac.callsign or ac.icao24.upper()}",
                indicator=ac.icao24,
                source="OpenSky",
                region=ac.origin_country or None,
                tags=frozenset({"uav"} if ac.category == 14 else ()),
                metadata={
                    "callsign": ac.callsign,
                    "latitude": ac.latitude,
                    "longitude": ac.longitude,
                    "altitude_m": ac.geo_altitude or ac.baro_altitude,
                    "velocity_ms": ac.velocity,
                    "heading": ac.true_track,
                    "vertical_rate": ac.vertical_rate,
                    "squawk": ac.squawk,
                    "on_ground": ac.on_ground,
                    "category": ac.category,
                },
            )
            for ac in military
        ]
        return SourcePayload(events=events, metrics=metrics)

    async def _auth_headers(self) -> dict[str, str]:
        tokens = self._tokens
        if tokens is None or not tokens.configured:
            if self._config.allow_anonymous:
                logger.info("OpenSky credentials not configured, querying anonymously")
                return {}
            raise ConfigurationError(
                "OpenSky client credentials not configured",
                code="missing_credentials",
            )
        token = await tokens.get()
        return {"Authorization": f"Bearer {token}"}

    def on_unauthorized(self) -> None:
        if self._tokens is not None:
            self._tokens.invalidate()

    def _metric(self, kind: str, label: str, value: int, timestamp) -> DerivedMetric:
        return DerivedMetric(
            id=f"OPENSKY-{kind}",
            kind=kind,
            label=label,
            value=float(value),
            category=Category.AVIATION,
            source="OpenSky",
            timestamp=timestamp,
        )
