"""Unit tests for provider value parsing helpers."""

from datetime import UTC, datetime

from observatory.infrastructure.source.parsing import parse_float, parse_timestamp

FALLBACK = datetime(2000, 1, 1, tzinfo=UTC)


class TestParseTimestamp:
    def test_iso_with_z(self):
        assert parse_timestamp("2024-05-01T10:00:00Z", FALLBACK) == datetime(2024, 5, 1, 10, tzinfo=UTC)

    def test_naive_space_separated_is_utc(self):
        assert parse_timestamp("2024-05-01 10:00:00", FALLBACK) == datetime(2024, 5, 1, 10, tzinfo=UTC)

    def test_utc_suffix(self):
        assert parse_timestamp("2024-05-01 10:00:00 UTC", FALLBACK) == datetime(2024, 5, 1, 10, tzinfo=UTC)

    def test_offset_converted_to_utc(self):
        assert parse_timestamp("2024-05-01T12:00:00+02:00", FALLBACK) == datetime(2024, 5, 1, 10, tzinfo=UTC)

    def test_compact_gdelt_form(self):
        assert parse_timestamp("20240501T100000Z", FALLBACK) == datetime(2024, 5, 1, 10, tzinfo=UTC)

    def test_epoch_seconds(self):
        assert parse_timestamp(1714557600, FALLBACK) == datetime(2024, 5, 1, 10, tzinfo=UTC)

    def test_missing_or_garbage_uses_fallback(self):
        assert parse_timestamp(None, FALLBACK) == FALLBACK
        assert parse_timestamp("", FALLBACK) == FALLBACK
        assert parse_timestamp("yesterday", FALLBACK) == FALLBACK


class TestParseFloat:
    def test_numeric_strings(self):
        assert parse_float("4.33") == 4.33
        assert parse_float(7) == 7.0

    def test_non_numeric_is_none(self):
        assert parse_float("null") is None
        assert parse_float(None) is None
