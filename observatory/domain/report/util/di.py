import random

from dishka import Provider, provide

from observatory.config import Config
from observatory.domain.aggregation.model.registry import AdapterRegistry
from observatory.domain.aggregation.service.pipeline import AggregationPipeline
from observatory.domain.analytics.service.clustering import GeoClusterer
from observatory.domain.analytics.service.engine import AnalyticsEngine
from observatory.domain.report.service.assembler import ResponseAssembler
from observatory.domain.report.service.snapshot import SnapshotService
from observatory.domain.shared.port.clock import Clock
from observatory.util.di.scope import Scope


class ReportProvider(Provider):
    @provide(scope=Scope.APP)
    def get_pipeline(self, adapters: AdapterRegistry) -> AggregationPipeline:
        return AggregationPipeline(adapters=adapters)

    @provide(scope=Scope.APP)
    def get_engine(self, config: Config) -> AnalyticsEngine:
        rng = random.Random(config.snapshot.seed)
        return AnalyticsEngine(clusterer=GeoClusterer(rng))

    @provide(scope=Scope.APP)
    def get_assembler(self, config: Config) -> ResponseAssembler:
        return ResponseAssembler(caps=config.snapshot.caps)

    @provide(scope=Scope.REQUEST)
    def get_snapshot_service(
        self,
        pipeline: AggregationPipeline,
        engine: AnalyticsEngine,
        assembler: ResponseAssembler,
        clock: Clock,
    ) -> SnapshotService:
        return SnapshotService(
            pipeline=pipeline,
            engine=engine,
            assembler=assembler,
            clock=clock,
        )
