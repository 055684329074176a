"""Helpers for the loosely-typed values providers return."""

import logging
from datetime import UTC, datetime

from observatory.domain.shared.model.value import as_utc

logger = logging.getLogger(__name__)

_COMPACT_FORMATS = (
    "%Y%m%dT%H%M%SZ",  # GDELT seendate
    "%Y%m%d%H%M%S",
)


def parse_timestamp(value: str | int | float | None, fallback: datetime) -> datetime:
    """Parse a provider timestamp into an aware UTC datetime.

    Accepts ISO-8601 (with or without "Z"), "YYYY-MM-DD HH:MM:SS[ UTC]",
    compact GDELT forms and epoch seconds. Unparseable or missing values
    yield ``fallback``.
    """
    if value is None or value == "":
        return fallback
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value, UTC)

    text = value.strip()
    if text.endswith(" UTC"):
        text = text[:-4]

    try:
        return as_utc(datetime.fromisoformat(text))
    except ValueError:
        pass

    for fmt in _COMPACT_FORMATS:
        try:
            return datetime.strptime(text, fmt).replace(tzinfo=UTC)
        except ValueError:
            continue

    logger.debug("Unparseable timestamp %r, using fallback", value)
    return fallback


def parse_float(value: str | int | float | None) -> float | None:
    """Lenient float conversion for numeric strings such as "4.33" or "null"."""
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
