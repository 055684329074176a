"""AnalyticsEngine - statistics, alerts, clusters and derived metrics over merged records."""

import logging
from datetime import datetime

from observatory.domain.analytics.model.value import Analysis
from observatory.domain.analytics.service.alerts import event_alerts, metric_alerts, rank_alerts
from observatory.domain.analytics.service.clustering import GeoClusterer
from observatory.domain.analytics.service.metrics import classify, event_metrics
from observatory.domain.analytics.service.ranking import dedup, rank
from observatory.domain.analytics.service.statistics import compute_statistics
from observatory.domain.shared.model.record import CanonicalEvent, Category, DerivedMetric
from observatory.domain.shared.service import Service

logger = logging.getLogger(__name__)


class AnalyticsEngine(Service):
    """Computes everything on the full set; capping is left to the assembler."""

    clusterer: GeoClusterer

    def analyze(
        self,
        events: list[CanonicalEvent],
        metrics: list[DerivedMetric],
        now: datetime,
        category: Category | None = None,
    ) -> Analysis:
        unique = dedup(events)
        if len(unique) != len(events):
            logger.debug("Dropped %d duplicate events", len(events) - len(unique))
        ranked = rank(unique)

        all_metrics = [classify(m) for m in [*metrics, *event_metrics(ranked, now, category)]]
        alerts = rank_alerts([*event_alerts(ranked), *metric_alerts(all_metrics)])

        return Analysis(
            events=ranked,
            metrics=all_metrics,
            alerts=alerts,
            clusters=self.clusterer.cluster(ranked),
            statistics=compute_statistics(ranked, now),
            computed_at=now,
        )
