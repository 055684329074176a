"""Unit tests for the metric threshold tables."""

import pytest

from observatory.domain.analytics.model.thresholds import (
    METRIC_THRESHOLDS,
    Band,
    Comparison,
    status_for,
)
from observatory.domain.shared.model.record import MetricStatus, Severity


class TestComparison:
    @pytest.mark.parametrize(
        ("op", "value", "expected"),
        [(">=", 10, True), (">", 10, False), ("<=", 10, True), ("<", 10, False), (">=", 9.9, False)],
    )
    def test_holds(self, op, value, expected):
        assert Comparison(op).holds(value, 10) is expected

    def test_band_describe(self):
        assert Band(op=Comparison.GE, threshold=20, severity=Severity.CRITICAL).describe() == ">= 20"


class TestThresholdRule:
    def test_crypto_change_is_absolute(self):
        rule = METRIC_THRESHOLDS["crypto_change_24h"]

        assert rule.evaluate(22) is Severity.CRITICAL
        assert rule.evaluate(-22) is Severity.CRITICAL
        assert rule.evaluate(12) is Severity.HIGH
        assert rule.evaluate(5) is None

    def test_most_severe_band_wins(self):
        rule = METRIC_THRESHOLDS["fear_greed"]

        assert rule.evaluate(8) is Severity.CRITICAL
        assert rule.evaluate(15) is Severity.HIGH
        assert rule.evaluate(50) is None
        assert rule.evaluate(95) is Severity.CRITICAL

    def test_status_mapping(self):
        rule = METRIC_THRESHOLDS["kp_index"]

        assert rule.status(7.3) is MetricStatus.CRITICAL
        assert rule.status(5.0) is MetricStatus.WARNING
        assert rule.status(2.0) is MetricStatus.NORMAL

    def test_status_for(self):
        assert status_for(None) is MetricStatus.NORMAL
        assert status_for(Severity.LOW) is MetricStatus.NORMAL
        assert status_for(Severity.MEDIUM) is MetricStatus.WARNING
        assert status_for(Severity.CRITICAL) is MetricStatus.CRITICAL
