"""NOAA Space Weather Prediction Center products.

Three adapters share the SWPC host: textual alerts, GOES X-ray flares and
current conditions (Kp index primary, solar wind and NOAA scales as
follow-ups).
"""

import asyncio
import re
from typing import Any

from pydantic import BaseModel, Field

from observatory.domain.shared.error import ParseError
from observatory.domain.shared.model.record import (
    CanonicalEvent,
    Category,
    DerivedMetric,
    Severity,
)
from observatory.infrastructure.source.base import HttpSourceAdapter, SourcePayload
from observatory.infrastructure.source.parsing import parse_float, parse_timestamp
from observatory.sdk.source.config import SourceConfig

SWPC_BASE_URL = "https://services.swpc.noaa.gov"
SOURCE_LABEL = "NOAA SWPC"

# Keyword rules, most severe first
_ALERT_KEYWORDS: list[tuple[Severity, tuple[str, ...]]] = [
    (Severity.CRITICAL, ("extreme", "g5", "s5", "r5", "x-class")),
    (Severity.HIGH, ("severe", "g4", "s4", "r4", "strong")),
    (Severity.MEDIUM, ("moderate", "g2", "g3", "m-class")),
]

_IMPACT_KEYWORDS: list[tuple[str, tuple[str, ...]]] = [
    ("HF Radio Communication", ("hf radio", "radio blackout")),
    ("GPS/Navigation Systems", ("gps", "navigation")),
    ("Satellite Operations", ("satellite", "spacecraft")),
    ("Power Grid", ("power", "grid")),
    ("Aurora visible at lower latitudes", ("aurora",)),
    ("Aviation (polar routes)", ("aviation",)),
]


def alert_severity(message: str) -> Severity:
    lower = message.lower()
    for severity, keywords in _ALERT_KEYWORDS:
        if any(k in lower for k in keywords):
            return severity
    return Severity.LOW


def alert_type(message: str) -> str:
    lower = message.lower()
    if "geomagnetic" in lower or "kp" in lower or re.search(r"g[1-5]", lower):
        return "geomagnetic"
    if "solar radiation" in lower or "proton" in lower or re.search(r"s[1-5]", lower):
        return "solar_radiation"
    if "radio blackout" in lower or re.search(r"r[1-5]", lower):
        return "radio_blackout"
    if "cme" in lower or "coronal mass ejection" in lower:
        return "cme"
    if "flare" in lower or "x-ray" in lower:
        return "solar_flare"
    return "geomagnetic"


def alert_title(message: str) -> str:
    lines = [line for line in message.splitlines() if line.strip()]
    first = lines[0] if lines else "Space Weather Alert"
    return re.sub(r"^#+\s*", "", first)[:100]


def alert_impacts(message: str) -> list[str]:
    lower = message.lower()
    return [impact for impact, keywords in _IMPACT_KEYWORDS if any(k in lower for k in keywords)]


def flare_severity(flare_class: str) -> Severity:
    letter = flare_class[:1].upper()
    if letter == "X":
        return Severity.CRITICAL
    if letter == "M":
        return Severity.HIGH
    if letter == "C":
        return Severity.MEDIUM
    return Severity.LOW


# =============================================================================
# Alerts
# =============================================================================


class SwpcAlertsConfig(SourceConfig):
    limit: int = Field(default=20, ge=0)
    url: str = f"{SWPC_BASE_URL}/products/alerts.json"


class SwpcAlert(BaseModel):
    product_id: str
    issue_datetime: str | None = None
    message: str = ""


class SwpcAlertsAdapter(HttpSourceAdapter[SwpcAlertsConfig]):
    """Textual space weather alerts, watches and warnings."""

    name = "swpc_alerts"
    config_class = SwpcAlertsConfig

    async def collect(self) -> SourcePayload:
        alerts: list[SwpcAlert] = await self.get_json(self._config.url, list[SwpcAlert])
        now = self._clock.now()

        events = [
            CanonicalEvent(
                id=f"SWPC-{alert.product_id}-{index}",
                category=Category.SPACE,
                kind="space_weather_alert",
                severity=alert_severity(alert.message),
                timestamp=parse_timestamp(alert.issue_datetime, now),
                label=alert_title(alert.message),
                indicator=alert.product_id,
                source=SOURCE_LABEL,
                group=alert_type(alert.message),
                tags=frozenset(alert_impacts(alert.message)),
                metadata={"description": alert.message[:500]},
            )
            for index, alert in enumerate(alerts[: self._config.limit])
        ]
        return SourcePayload(events=events)


# =============================================================================
# Solar flares
# =============================================================================


class SwpcFlaresConfig(SourceConfig):
    limit: int = Field(default=20, ge=0)
    url: str = f"{SWPC_BASE_URL}/json/goes/primary/xray-flares-latest.json"


class XrayFlare(BaseModel):
    begin_time: str
    max_time: str | None = None
    end_time: str | None = None
    begin_class: str | None = None
    current_class: str | None = None
    max_class: str | None = None


class SwpcFlaresAdapter(HttpSourceAdapter[SwpcFlaresConfig]):
    """GOES X-ray flares, classified by peak flare class."""

    name = "swpc_flares"
    config_class = SwpcFlaresConfig

    async def collect(self) -> SourcePayload:
        flares: list[XrayFlare] = await self.get_json(self._config.url, list[XrayFlare])
        now = self._clock.now()

        events = []
        for index, flare in enumerate(flares[: self._config.limit]):
            flare_class = flare.max_class or flare.current_class or "Unknown"
            events.append(
                CanonicalEvent(
                    id=f"FLARE-{index}-{flare.begin_time}",
                    category=Category.SPACE,
                    kind="solar_flare",
                    severity=flare_severity(flare_class),
                    timestamp=parse_timestamp(flare.begin_time, now),
                    label=f"{flare_class} solar flare",
                    indicator=flare_class,
                    source=SOURCE_LABEL,
                    group=flare_class[:1] if flare_class != "Unknown" else None,
                    metadata={
                        "peak_time": flare.max_time,
                        "end_time": flare.end_time,
                    },
                )
            )
        return SourcePayload(events=events)


# =============================================================================
# Current conditions
# =============================================================================


class SwpcConditionsConfig(SourceConfig):
    base_url: str = SWPC_BASE_URL


def _latest_row(rows: list[Any], key: str, index: int) -> tuple[Any, Any] | None:
    """Last (time, value) from an SWPC product table.

    Products come either as a header row followed by list rows, or as a list of
    objects. Returns None when there is no data row.
    """
    data = [row for row in rows if not (isinstance(row, list) and row and row[0] == "time_tag")]
    if not data:
        return None
    last = data[-1]
    if isinstance(last, dict):
        return last.get("time_tag"), last.get(key)
    if isinstance(last, list) and len(last) > index:
        return last[0], last[index]
    raise ParseError(f"Unexpected SWPC row shape: {last!r}")


class SwpcConditionsAdapter(HttpSourceAdapter[SwpcConditionsConfig]):
    """Scalar space weather conditions as metrics.

    Kp index is the primary call. Solar wind and NOAA scales are follow-ups
    whose failure only drops their metric.
    """

    name = "swpc_conditions"
    config_class = SwpcConditionsConfig

    async def collect(self) -> SourcePayload:
        base = self._config.base_url
        kp_rows = await self.get_json(f"{base}/products/noaa-planetary-k-index.json", list[Any])
        wind_rows, scales = await asyncio.gather(
            self.try_get_json(f"{base}/products/solar-wind/plasma-7-day.json", list[Any]),
            self.try_get_json(f"{base}/products/noaa-scales.json", dict[str, Any]),
        )

        now = self._clock.now()
        metrics = []

        kp = _latest_row(kp_rows, "Kp", 1)
        if kp is None:
            raise ParseError("Kp index product has no data rows")
        kp_value = parse_float(kp[1])
        if kp_value is None:
            raise ParseError(f"Kp value is not numeric: {kp[1]!r}")
        metrics.append(self._metric("kp_index", "Kp Index", kp_value, "", parse_timestamp(kp[0], now)))

        if wind_rows is not None:
            try:
                wind = _latest_row(wind_rows, "speed", 2)
            except ParseError as e:
                self.log_degraded(e)
                wind = None
            speed = parse_float(wind[1]) if wind else None
            if speed is not None:
                metrics.append(
                    self._metric("solar_wind_speed", "Solar Wind", speed, "km/s", parse_timestamp(wind[0], now))
                )

        if scales is not None:
            current = scales.get("-1") or {}
            g_scale = parse_float((current.get("G") or {}).get("Scale"))
            metrics.append(
                self._metric(
                    "geomagnetic_scale",
                    "Geomagnetic Storm",
                    g_scale or 0.0,
                    "G",
                    now,
                )
            )

        return SourcePayload(metrics=metrics)

    def _metric(self, kind: str, label: str, value: float, unit: str, timestamp) -> DerivedMetric:
        return DerivedMetric(
            id=f"SWPC-{kind}",
            kind=kind,
            label=label,
            value=value,
            unit=unit,
            category=Category.SPACE,
            source=SOURCE_LABEL,
            timestamp=timestamp,
        )
