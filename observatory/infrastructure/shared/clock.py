"""Wall clock adapter for the Clock port."""

from datetime import UTC, datetime

from observatory.domain.shared.port.clock import Clock


class SystemClock(Clock):
    def now(self) -> datetime:
        return datetime.now(UTC)
