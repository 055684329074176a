"""ResponseAssembler - shapes analytics output into the bounded snapshot payload."""

from datetime import datetime

from observatory.domain.analytics.model.value import Analysis
from observatory.domain.report.model.value import (
    AggregatedResult,
    SnapshotCaps,
    SnapshotFilters,
    SourceStatus,
)
from observatory.domain.shared.model.source import SourceResult
from observatory.domain.shared.service import Service


class ResponseAssembler(Service):
    caps: SnapshotCaps

    def assemble(
        self,
        results: list[SourceResult],
        analysis: Analysis,
        filters: SnapshotFilters,
        generated_at: datetime,
    ) -> AggregatedResult:
        """Truncate each collection to its cap and attach per-source status.

        Statistics pass through untouched; they describe the uncapped set.
        Every source appears in ``sources``, in registry order.
        """
        event_cap = self.caps.events
        if filters.limit is not None:
            event_cap = min(event_cap, filters.limit)

        return AggregatedResult(
            events=analysis.events[:event_cap],
            metrics=analysis.metrics[: self.caps.metrics],
            alerts=analysis.alerts[: self.caps.alerts],
            clusters=analysis.clusters[: self.caps.clusters],
            statistics=analysis.statistics,
            sources={r.source_id: SourceStatus.from_result(r) for r in results},
            degraded=[r.source_id for r in results if not r.ok],
            generated_at=generated_at,
        )
