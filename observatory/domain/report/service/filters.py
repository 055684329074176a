"""Request filters applied to merged records before analytics."""

import re

from observatory.domain.analytics.model.geo import canonical_region
from observatory.domain.report.model.value import SnapshotFilters
from observatory.domain.shared.error import ValidationError
from observatory.domain.shared.model.record import CanonicalEvent, DerivedMetric

# Country codes and names: letters plus the punctuation that appears in official names
_REGION_PATTERN = re.compile(r"[A-Za-z][A-Za-z .,'()\-]{0,63}")


def validate_filters(filters: SnapshotFilters) -> None:
    """Reject filters that can never match a provider's region.

    Raises:
        ValidationError: If the region is blank or not a plausible country code or name.
    """
    if filters.region is None:
        return
    if not _REGION_PATTERN.fullmatch(filters.region.strip()):
        raise ValidationError(
            f"Invalid region {filters.region!r}: expected a country code or name",
            field="region",
        )


def apply_filters(
    events: list[CanonicalEvent],
    metrics: list[DerivedMetric],
    filters: SnapshotFilters,
) -> tuple[list[CanonicalEvent], list[DerivedMetric]]:
    """Category narrows events and metrics; region narrows events only.

    Order is preserved.
    """
    if filters.category is not None:
        events = [e for e in events if e.category is filters.category]
        metrics = [m for m in metrics if m.category is filters.category]

    region = canonical_region(filters.region)
    if region is not None:
        events = [e for e in events if canonical_region(e.region) == region]

    return events, metrics
