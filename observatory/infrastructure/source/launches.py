"""Orbital launches: SpaceX API and Launch Library 2 (both keyless).

Launch dates in the future are stamped at collection time; the scheduled
date is kept in ``metadata["net"]`` with a countdown in seconds.
"""

import asyncio
from datetime import datetime

from pydantic import BaseModel, Field

from observatory.domain.shared.model.record import CanonicalEvent, Category, Severity
from observatory.infrastructure.source.base import HttpSourceAdapter, SourcePayload
from observatory.infrastructure.source.parsing import parse_timestamp
from observatory.sdk.source.config import SourceConfig

_STATUS_SEVERITY: dict[str, Severity] = {
    "failure": Severity.HIGH,
    "live": Severity.MEDIUM,
    "upcoming": Severity.LOW,
    "success": Severity.LOW,
    "tbd": Severity.LOW,
}


def launch_event(
    *,
    event_id: str,
    name: str,
    status: str,
    net: datetime,
    now: datetime,
    provider: str,
    rocket: str,
    pad: str,
    source: str,
    region: str | None = None,
    webcast: str | None = None,
    details: str | None = None,
) -> CanonicalEvent:
    countdown = int((net - now).total_seconds())
    return CanonicalEvent(
        id=event_id,
        category=Category.SPACE,
        kind="launch",
        severity=_STATUS_SEVERITY.get(status, Severity.LOW),
        timestamp=min(net, now),
        label=f"{name} ({rocket})",
        indicator=webcast or "",
        source=source,
        region=region,
        group=provider,
        tags=frozenset({"launch", status}),
        metadata={
            "status": status,
            "net": net.isoformat(),
            "countdown_s": countdown if countdown > 0 else None,
            "provider": provider,
            "rocket": rocket,
            "pad": pad,
            "details": details,
        },
    )


# =============================================================================
# SpaceX
# =============================================================================


class SpaceXConfig(SourceConfig):
    limit: int = Field(default=10, ge=0)
    base_url: str = "https://api.spacexdata.com"
    upcoming: int = Field(default=5, ge=0)  # Upcoming launches kept
    past: int = Field(default=5, ge=0)  # Most recent past launches kept


class SpaceXLinks(BaseModel):
    webcast: str | None = None


class SpaceXLaunch(BaseModel):
    id: str
    name: str
    date_utc: str
    upcoming: bool
    success: bool | None = None
    details: str | None = None
    rocket: str | None = None
    launchpad: str | None = None
    links: SpaceXLinks = Field(default_factory=SpaceXLinks)


class SpaceXRocket(BaseModel):
    id: str
    name: str


class SpaceXLaunchpad(BaseModel):
    id: str
    name: str
    region: str | None = None


def spacex_status(launch: SpaceXLaunch, net: datetime, now: datetime) -> str:
    if launch.upcoming:
        return "live" if net <= now else "upcoming"
    if launch.success is True:
        return "success"
    if launch.success is False:
        return "failure"
    return "tbd"


class SpaceXAdapter(HttpSourceAdapter[SpaceXConfig]):
    """Next upcoming and most recent past SpaceX launches.

    Upcoming launches are the primary call. Past launches, rocket names and
    pad names are follow-ups that only degrade the result.
    """

    name = "spacex"
    config_class = SpaceXConfig

    async def collect(self) -> SourcePayload:
        base = self._config.base_url
        upcoming: list[SpaceXLaunch] = await self.get_json(f"{base}/v5/launches/upcoming", list[SpaceXLaunch])
        past, rockets, pads = await asyncio.gather(
            self.try_get_json(f"{base}/v5/launches/past", list[SpaceXLaunch]),
            self.try_get_json(f"{base}/v4/rockets", list[SpaceXRocket]),
            self.try_get_json(f"{base}/v4/launchpads", list[SpaceXLaunchpad]),
        )
        rocket_names = {r.id: r.name for r in rockets or []}
        pad_names = {p.id: f"{p.name}, {p.region}" if p.region else p.name for p in pads or []}

        now = self._clock.now()
        recent_past = sorted(past or [], key=lambda launch: launch.date_utc, reverse=True)
        selected = [*upcoming[: self._config.upcoming], *recent_past[: self._config.past]]

        events = []
        for launch in selected:
            net = parse_timestamp(launch.date_utc, now)
            events.append(
                launch_event(
                    event_id=f"SPACEX-{launch.id}",
                    name=launch.name,
                    status=spacex_status(launch, net, now),
                    net=net,
                    now=now,
                    provider="SpaceX",
                    rocket=rocket_names.get(launch.rocket or "", "Falcon 9"),
                    pad=pad_names.get(launch.launchpad or "", "Unknown pad"),
                    source="SpaceX",
                    region="US",
                    webcast=launch.links.webcast,
                    details=launch.details,
                )
            )
        return SourcePayload(events=events)


# =============================================================================
# Launch Library 2
# =============================================================================


class LaunchLibraryConfig(SourceConfig):
    limit: int = Field(default=10, ge=0)
    url: str = "https://ll.thespacedevs.com/2.2.0/launch/upcoming/"
    # SpaceX launches already come from the SpaceX adapter
    skip_providers: list[str] = Field(default_factory=lambda: ["SpX"])


class LL2Status(BaseModel):
    abbrev: str = ""


class LL2Provider(BaseModel):
    name: str = ""
    abbrev: str = ""


class LL2RocketConfiguration(BaseModel):
    name: str = ""


class LL2Rocket(BaseModel):
    configuration: LL2RocketConfiguration = Field(default_factory=LL2RocketConfiguration)


class LL2Mission(BaseModel):
    name: str = ""
    description: str | None = None


class LL2Location(BaseModel):
    name: str = ""
    country_code: str | None = None


class LL2Pad(BaseModel):
    name: str = ""
    location: LL2Location = Field(default_factory=LL2Location)


class LL2VideoUrl(BaseModel):
    url: str


class LL2Launch(BaseModel):
    id: str
    name: str
    net: str | None = None
    status: LL2Status = Field(default_factory=LL2Status)
    launch_service_provider: LL2Provider = Field(default_factory=LL2Provider)
    rocket: LL2Rocket = Field(default_factory=LL2Rocket)
    mission: LL2Mission | None = None
    pad: LL2Pad = Field(default_factory=LL2Pad)
    webcast_live: bool = False
    vidURLs: list[LL2VideoUrl] = Field(default_factory=list)


class LL2Response(BaseModel):
    results: list[LL2Launch] = Field(default_factory=list)


def ll2_status(launch: LL2Launch) -> str:
    match launch.status.abbrev:
        case "Go":
            return "upcoming"
        case "Success":
            return "success"
        case "Failure":
            return "failure"
        case "TBC" | "TBD":
            return "tbd"
    return "live" if launch.webcast_live else "tbd"


class LaunchLibraryAdapter(HttpSourceAdapter[LaunchLibraryConfig]):
    """Upcoming launches from every provider."""

    name = "launch_library"
    config_class = LaunchLibraryConfig

    async def collect(self) -> SourcePayload:
        body: LL2Response = await self.get_json(
            self._config.url,
            LL2Response,
            params={"limit": self._config.limit, "mode": "normal"},
        )
        now = self._clock.now()
        skip = set(self._config.skip_providers)

        events = []
        for launch in body.results:
            provider = launch.launch_service_provider
            if provider.abbrev in skip:
                continue
            location = launch.pad.location
            events.append(
                launch_event(
                    event_id=f"LL2-{launch.id}",
                    name=launch.mission.name if launch.mission and launch.mission.name else launch.name,
                    status=ll2_status(launch),
                    net=parse_timestamp(launch.net, now),
                    now=now,
                    provider=provider.abbrev or provider.name or "Unknown",
                    rocket=launch.rocket.configuration.name or "Unknown rocket",
                    pad=f"{launch.pad.name or 'Unknown'}, {location.name or 'Unknown'}",
                    source="Launch Library 2",
                    region=location.country_code,
                    webcast=launch.vidURLs[0].url if launch.vidURLs else None,
                    details=launch.mission.description if launch.mission else None,
                )
            )
        return SourcePayload(events=events)
