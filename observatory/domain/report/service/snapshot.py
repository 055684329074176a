"""SnapshotService - one end-to-end aggregation run."""

import logging

import logfire

from observatory.domain.aggregation.service.pipeline import AggregationPipeline
from observatory.domain.analytics.service.engine import AnalyticsEngine
from observatory.domain.report.model.value import AggregatedResult, SnapshotFilters
from observatory.domain.report.service.assembler import ResponseAssembler
from observatory.domain.report.service.filters import apply_filters, validate_filters
from observatory.domain.shared.port.clock import Clock
from observatory.domain.shared.service import Service

logger = logging.getLogger(__name__)


class SnapshotService(Service):
    """Runs the pipeline, filters, analyzes and assembles.

    Nothing is cached between calls; every aggregate() recomputes from the
    providers.
    """

    pipeline: AggregationPipeline
    engine: AnalyticsEngine
    assembler: ResponseAssembler
    clock: Clock

    async def aggregate(self, filters: SnapshotFilters | None = None) -> AggregatedResult:
        """Run one snapshot.

        Raises:
            ValidationError: If the filters can never match, before any provider is called.
        """
        filters = filters or SnapshotFilters()
        validate_filters(filters)

        with logfire.span(
            "AggregateSnapshot",
            region=filters.region,
            category=filters.category,
            limit=filters.limit,
        ):
            results = await self.pipeline.run()

            events = [event for result in results for event in result.events]
            metrics = [metric for result in results for metric in result.metrics]
            events, metrics = apply_filters(events, metrics, filters)

            now = self.clock.now()
            analysis = self.engine.analyze(events, metrics, now, category=filters.category)
            snapshot = self.assembler.assemble(results, analysis, filters, generated_at=now)

            logger.info(
                "Snapshot: %d events, %d metrics, %d alerts, %d clusters, degraded=%s",
                len(snapshot.events),
                len(snapshot.metrics),
                len(snapshot.alerts),
                len(snapshot.clusters),
                snapshot.degraded or "none",
            )
            return snapshot
