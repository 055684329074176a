"""Ransomware.live recent victims."""

from pydantic import BaseModel

from observatory.domain.shared.model.record import CanonicalEvent, Category, Severity
from observatory.infrastructure.source.base import HttpSourceAdapter, SourcePayload
from observatory.infrastructure.source.parsing import parse_timestamp
from observatory.sdk.source.config import SourceConfig


class RansomwareLiveConfig(SourceConfig):
    url: str = "https://api.ransomware.live/v1/recentvictims"


class Victim(BaseModel):
    post_title: str
    group_name: str
    discovered: str | None = None
    published: str | None = None
    description: str | None = None
    website: str | None = None
    country: str | None = None
    activity: str | None = None


class RansomwareLiveAdapter(HttpSourceAdapter[RansomwareLiveConfig]):
    """Victims listed on ransomware leak sites. Every listing is critical."""

    name = "ransomware_live"
    config_class = RansomwareLiveConfig

    async def collect(self) -> SourcePayload:
        victims: list[Victim] = await self.get_json(self._config.url, list[Victim])
        now = self._clock.now()

        events = []
        for index, victim in enumerate(victims[: self._config.limit]):
            details = " ".join(
                part
                for part in (
                    f"Sector: {victim.activity}" if victim.activity else "",
                    f"Country: {victim.country}" if victim.country else "",
                )
                if part
            )
            events.append(
                CanonicalEvent(
                    id=f"RW-{index}-{victim.group_name}",
                    category=Category.CYBER,
                    kind="ransomware",
                    severity=Severity.CRITICAL,
                    timestamp=parse_timestamp(victim.discovered, now),
                    label=f"Ransomware: {victim.group_name} claims {victim.post_title}",
                    indicator=victim.post_title,
                    source="Ransomware.live",
                    region=victim.country or None,
                    group=victim.group_name,
                    tags=frozenset(t for t in (victim.group_name, victim.activity, victim.country) if t),
                    metadata={
                        "description": details,
                        "website": victim.website,
                        "sector": victim.activity,
                        "country": victim.country,
                        "indicator_type": "organization",
                    },
                )
            )
        return SourcePayload(events=events)
