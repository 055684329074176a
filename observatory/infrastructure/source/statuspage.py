"""Atlassian Statuspage ``status.json`` for a single hosted service.

One adapter instance per monitored page; source ids are ``statuspage:<name>``.
"""

from pydantic import BaseModel, Field

from observatory.domain.shared.model.record import CanonicalEvent, Category, Severity
from observatory.infrastructure.source.base import HttpSourceAdapter, SourcePayload
from observatory.infrastructure.source.parsing import parse_timestamp
from observatory.sdk.source.config import SourceConfig

# Default pages monitored when no explicit source list is configured
DEFAULT_PAGES: dict[str, tuple[str, str]] = {
    "cloudflare": ("Cloudflare", "https://www.cloudflarestatus.com/api/v2/status.json"),
    "github": ("GitHub", "https://www.githubstatus.com/api/v2/status.json"),
    "fastly": ("Fastly", "https://status.fastly.com/api/v2/status.json"),
    "discord": ("Discord", "https://discordstatus.com/api/v2/status.json"),
    "vercel": ("Vercel", "https://www.vercel-status.com/api/v2/status.json"),
}

# indicator -> (service status, event severity); "none" produces no event
_INDICATORS: dict[str, tuple[str, Severity]] = {
    "minor": ("degraded", Severity.MEDIUM),
    "degraded": ("degraded", Severity.MEDIUM),
    "major": ("partial_outage", Severity.HIGH),
    "critical": ("major_outage", Severity.CRITICAL),
}


class StatuspageConfig(SourceConfig):
    service: str  # Display name, e.g. "GitHub"
    url: str


class PageStatus(BaseModel):
    indicator: str = "none"
    description: str = ""


class PageInfo(BaseModel):
    name: str | None = None
    url: str | None = None
    updated_at: str | None = None


class Incident(BaseModel):
    id: str
    name: str = ""
    status: str = ""
    impact: str = ""
    created_at: str | None = None


class StatuspageResponse(BaseModel):
    status: PageStatus = Field(default_factory=PageStatus)
    page: PageInfo = Field(default_factory=PageInfo)
    incidents: list[Incident] = Field(default_factory=list)


class StatuspageAdapter(HttpSourceAdapter[StatuspageConfig]):
    """Emits one service_degradation event while the page reports an issue."""

    name = "statuspage"
    config_class = StatuspageConfig

    async def collect(self) -> SourcePayload:
        body: StatuspageResponse = await self.get_json(self._config.url, StatuspageResponse)
        indicator = body.status.indicator.lower()
        if indicator not in _INDICATORS:
            return SourcePayload()

        status, severity = _INDICATORS[indicator]
        service = self._config.service
        now = self._clock.now()
        incidents = body.incidents[:5]
        started = incidents[0].created_at if incidents else body.page.updated_at
        readable = status.replace("_", " ")

        event = CanonicalEvent(
            id=f"SVC-{service}",
            category=Category.INFRASTRUCTURE,
            kind="service_degradation",
            severity=severity,
            timestamp=parse_timestamp(started, now),
            label=f"{service}: {readable.upper()}",
            indicator=service,
            source="StatusPage",
            group=service,
            metadata={
                "status": status,
                "indicator": indicator,
                "description": body.status.description,
                "page_url": body.page.url or self._config.url,
                "incidents": [
                    {"id": i.id, "title": i.name, "status": i.status, "impact": i.impact}
                    for i in incidents
                ],
            },
        )
        return SourcePayload(events=[event])
