"""Dependency injection provider for source adapters."""

from dishka import Provider, provide

from observatory.config import Config
from observatory.domain.aggregation.model.registry import AdapterRegistry
from observatory.domain.shared.port.clock import Clock
from observatory.infrastructure.auth.token_cache import OAuth2TokenCache
from observatory.infrastructure.http.fetcher import DeadlineFetcher
from observatory.infrastructure.source.base import SourceContext
from observatory.infrastructure.source.discovery import build_registry
from observatory.util.di.scope import Scope


class SourceProvider(Provider):
    """Provides the configured adapter registry."""

    @provide(scope=Scope.APP)
    def get_source_context(
        self,
        fetcher: DeadlineFetcher,
        clock: Clock,
        opensky_tokens: OAuth2TokenCache,
    ) -> SourceContext:
        return SourceContext(
            fetcher=fetcher,
            clock=clock,
            token_caches={"opensky": opensky_tokens},
        )

    @provide(scope=Scope.APP)
    def get_registry(self, config: Config, context: SourceContext) -> AdapterRegistry:
        """Build every configured adapter.

        Discovers available adapter classes via entry points, validates each
        entry's configuration and instantiates the adapters once for the
        lifetime of the process.
        """
        return build_registry(config.sources, context)
