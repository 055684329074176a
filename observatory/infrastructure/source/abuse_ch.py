"""abuse.ch feeds: URLhaus malware URLs and the Feodo Tracker C2 blocklist."""

from pydantic import BaseModel, Field

from observatory.domain.shared.error import ParseError
from observatory.domain.shared.model.record import CanonicalEvent, Category, Severity
from observatory.infrastructure.source.base import HttpSourceAdapter, SourcePayload
from observatory.infrastructure.source.parsing import parse_timestamp
from observatory.sdk.source.config import SourceConfig

# =============================================================================
# URLhaus
# =============================================================================


class URLhausConfig(SourceConfig):
    base_url: str = "https://urlhaus-api.abuse.ch/v1"
    fetch_count: int = Field(default=50, gt=0)  # Recent URLs requested before filtering


class URLhausEntry(BaseModel):
    id: str | int | None = None
    url: str
    url_status: str = ""
    host: str | None = None
    date_added: str | None = None
    threat: str | None = None
    tags: list[str] | None = None


class URLhausResponse(BaseModel):
    query_status: str | None = None
    urls: list[URLhausEntry] = Field(default_factory=list)


class URLhausAdapter(HttpSourceAdapter[URLhausConfig]):
    """Recently reported malware distribution URLs. Only online URLs are kept."""

    name = "urlhaus"
    config_class = URLhausConfig

    async def collect(self) -> SourcePayload:
        url = f"{self._config.base_url}/urls/recent/limit/{self._config.fetch_count}/"
        body: URLhausResponse = await self.get_json(url, URLhausResponse)
        now = self._clock.now()

        events = []
        for index, entry in enumerate(u for u in body.urls if u.url_status == "online"):
            tags = entry.tags or []
            events.append(
                CanonicalEvent(
                    id=f"URLHAUS-{entry.id if entry.id is not None else index}",
                    category=Category.CYBER,
                    kind="malware_url",
                    severity=Severity.HIGH,
                    timestamp=parse_timestamp(entry.date_added, now),
                    label=f"Malware URL: {entry.threat or 'Unknown'}",
                    indicator=entry.url,
                    source="URLhaus",
                    group=entry.threat,
                    tags=frozenset(tags),
                    metadata={
                        "host": entry.host,
                        "threat": entry.threat,
                        "status": entry.url_status,
                        "indicator_type": "url",
                    },
                )
            )
        return SourcePayload(events=events)


# =============================================================================
# Feodo Tracker
# =============================================================================


class FeodoConfig(SourceConfig):
    url: str = "https://feodotracker.abuse.ch/downloads/ipblocklist_recommended.json"


class FeodoEntry(BaseModel):
    ip_address: str
    port: int
    status: str = ""
    hostname: str | None = None
    as_number: int | None = None
    as_name: str | None = None
    country: str | None = None
    first_seen: str | None = None
    last_online: str | None = None
    malware: str = "Unknown"


class FeodoAdapter(HttpSourceAdapter[FeodoConfig]):
    """Botnet command-and-control servers. Online servers are critical."""

    name = "feodo"
    config_class = FeodoConfig

    async def collect(self) -> SourcePayload:
        entries = await self.get_json(self._config.url, list[FeodoEntry] | dict)
        if isinstance(entries, dict):
            # The blocklist answers with an object when it is empty or rate limited
            raise ParseError("Feodo Tracker returned an object instead of a blocklist")

        now = self._clock.now()
        events = []
        for index, c2 in enumerate(entries[: self._config.limit]):
            online = c2.status == "online"
            events.append(
                CanonicalEvent(
                    id=f"FEODO-{index}-{c2.ip_address}",
                    category=Category.CYBER,
                    kind="botnet_c2",
                    severity=Severity.CRITICAL if online else Severity.HIGH,
                    timestamp=parse_timestamp(c2.first_seen, now),
                    label=f"Botnet C2: {c2.malware}",
                    indicator=f"{c2.ip_address}:{c2.port}",
                    source="Feodo Tracker",
                    region=c2.country,
                    group=c2.malware,
                    tags=frozenset({c2.malware, c2.country or "unknown"}),
                    metadata={
                        "ip": c2.ip_address,
                        "port": c2.port,
                        "status": c2.status,
                        "as_name": c2.as_name,
                        "as_number": c2.as_number,
                        "country": c2.country,
                        "indicator_type": "ip:port",
                    },
                )
            )
        return SourcePayload(events=events)
