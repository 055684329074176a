"""IODA (Internet Outage Detection and Analysis) alerts for the last 24 hours."""

from datetime import timedelta

from pydantic import BaseModel, Field

from observatory.domain.shared.model.record import CanonicalEvent, Category, Severity
from observatory.infrastructure.source.base import HttpSourceAdapter, SourcePayload
from observatory.infrastructure.source.parsing import parse_timestamp
from observatory.sdk.source.config import SourceConfig


class IodaConfig(SourceConfig):
    limit: int = Field(default=50, ge=0)
    url: str = "https://api.ioda.inetintel.cc.gatech.edu/v2/alerts"
    window_hours: int = Field(default=24, gt=0)


class IodaEntity(BaseModel):
    type: str
    code: str
    name: str


class IodaAlert(BaseModel):
    entity: IodaEntity
    time: int
    level: str = ""
    value: float = 1.0
    historyValue: float | None = None
    datasource: str = ""


class IodaResponse(BaseModel):
    data: list[IodaAlert] = Field(default_factory=list)


def outage_severity(level: str, value: float) -> Severity:
    """Severity from IODA's alert level or, failing that, the signal ratio."""
    if level == "critical" or value < 0.3:
        return Severity.CRITICAL
    if level == "warning" or value < 0.7:
        return Severity.HIGH
    return Severity.MEDIUM


class IodaAdapter(HttpSourceAdapter[IodaConfig]):
    """Connectivity outages by country, region or ASN."""

    name = "ioda"
    config_class = IodaConfig

    async def collect(self) -> SourcePayload:
        now = self._clock.now()
        until = int(now.timestamp())
        since = until - int(timedelta(hours=self._config.window_hours).total_seconds())
        body: IodaResponse = await self.get_json(
            self._config.url,
            IodaResponse,
            params={"from": since, "until": until, "limit": self._config.limit},
        )

        events = []
        for alert in body.data:
            entity = alert.entity
            severity = outage_severity(alert.level, alert.value)
            events.append(
                CanonicalEvent(
                    id=f"IODA-{entity.type}-{entity.code}-{alert.time}",
                    category=Category.INFRASTRUCTURE,
                    kind="outage",
                    severity=severity,
                    timestamp=parse_timestamp(alert.time, now),
                    label=f"Internet Outage: {entity.name}",
                    indicator=entity.name,
                    source="IODA",
                    region=entity.code if entity.type == "country" else None,
                    group=alert.datasource or None,
                    tags=frozenset({entity.type}),
                    metadata={
                        "entity_type": entity.type,
                        "entity_code": entity.code,
                        "score": alert.value,
                        "datasource": alert.datasource,
                        "duration_minutes": max(0, (until - alert.time) // 60),
                        "description": (
                            f"{entity.name} experiencing {severity} connectivity issues. "
                            f"Signal: {alert.value * 100:.1f}% of normal"
                        ),
                    },
                )
            )
        return SourcePayload(events=events)
