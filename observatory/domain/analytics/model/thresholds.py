"""Declarative severity tables for alert synthesis and metric status.

Cutoffs carry over the dashboard's long-standing numbers. They are tuning
knobs, not facts about the providers.
"""

import operator
from enum import StrEnum

from observatory.domain.shared.model.record import MetricStatus, Severity
from observatory.domain.shared.model.value import ValueObject


class Comparison(StrEnum):
    GE = ">="
    GT = ">"
    LE = "<="
    LT = "<"

    def holds(self, value: float, threshold: float) -> bool:
        return _OPERATORS[self.value](value, threshold)


_OPERATORS = {
    ">=": operator.ge,
    ">": operator.gt,
    "<=": operator.le,
    "<": operator.lt,
}


class Band(ValueObject):
    """One threshold: ``value <op> threshold`` means ``severity``."""

    op: Comparison
    threshold: float
    severity: Severity

    def matches(self, value: float) -> bool:
        return self.op.holds(value, self.threshold)

    def describe(self) -> str:
        return f"{self.op.value} {self.threshold:g}"


class ThresholdRule(ValueObject):
    """Severity bands for one metric kind.

    Bands are evaluated most severe first; the first match wins. With
    ``absolute`` the magnitude is compared, so -22% and +22% classify alike.
    """

    kind: str
    title: str
    bands: tuple[Band, ...]
    absolute: bool = False

    def breach(self, value: float) -> Band | None:
        """The most severe band the value falls into, or None."""
        subject = abs(value) if self.absolute else value
        for band in sorted(self.bands, key=lambda b: b.severity.rank):
            if band.matches(subject):
                return band
        return None

    def evaluate(self, value: float) -> Severity | None:
        band = self.breach(value)
        return band.severity if band else None

    def status(self, value: float) -> MetricStatus:
        return status_for(self.evaluate(value))


def status_for(severity: Severity | None) -> MetricStatus:
    """critical maps to critical, high/medium to warning, no breach (or low) to normal."""
    if severity is None or severity is Severity.LOW:
        return MetricStatus.NORMAL
    if severity is Severity.CRITICAL:
        return MetricStatus.CRITICAL
    return MetricStatus.WARNING


def _rule(kind: str, title: str, *bands: tuple[str, float, Severity], absolute: bool = False) -> ThresholdRule:
    return ThresholdRule(
        kind=kind,
        title=title,
        bands=tuple(Band(op=Comparison(op), threshold=t, severity=s) for op, t, s in bands),
        absolute=absolute,
    )


_C, _H = Severity.CRITICAL, Severity.HIGH

METRIC_THRESHOLDS: dict[str, ThresholdRule] = {
    rule.kind: rule
    for rule in (
        # Markets
        _rule("crypto_change_24h", "Crypto volatility", (">=", 20, _C), (">=", 10, _H), absolute=True),
        _rule("index_change", "Index volatility", (">=", 4, _C), (">=", 2, _H), absolute=True),
        _rule(
            "fear_greed",
            "Extreme market sentiment",
            ("<=", 10, _C),
            (">=", 90, _C),
            ("<=", 20, _H),
            (">=", 80, _H),
        ),
        # Space weather
        _rule("kp_index", "Geomagnetic activity", (">=", 7, _C), (">=", 5, _H)),
        _rule("solar_wind_speed", "High-speed solar wind", (">", 800, _C), (">", 600, _H)),
        _rule("geomagnetic_scale", "Geomagnetic storm", (">=", 4, _C), (">=", 2, _H)),
        # Event-derived
        _rule("malware_urls_active", "Malware URL surge", (">", 50, _H)),
        _rule("ransomware_victims_24h", "Ransomware surge", (">", 10, _C), (">", 5, _H)),
        _rule("botnet_c2_tracked", "Botnet C2 surge", (">", 100, _H)),
        _rule("net_outages", "Internet outages", (">", 10, _H)),
        _rule("critical_outages", "Critical internet outages", (">", 5, _C)),
        _rule("services_down", "Cloud services down", (">", 0, _C)),
    )
}

# Event kind -> minimum severity at which the event becomes an alert
EVENT_ALERT_KINDS: dict[str, Severity] = {
    "ransomware": Severity.LOW,
    "outage": Severity.LOW,
    "service_degradation": Severity.LOW,
    "space_weather_alert": Severity.LOW,
    "solar_flare": Severity.HIGH,
}
