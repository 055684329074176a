"""DI provider for outbound HTTP and credentials."""

from datetime import timedelta
from typing import AsyncIterable

import httpx
from dishka import Provider, from_context, provide

from observatory.config import Config
from observatory.domain.shared.port.clock import Clock
from observatory.infrastructure.auth.token_cache import ClientCredentials, OAuth2TokenCache
from observatory.infrastructure.http.fetcher import DeadlineFetcher
from observatory.infrastructure.shared.clock import SystemClock
from observatory.util.di.scope import Scope


class HttpProvider(Provider):
    """Process-wide HTTP client, fetcher, clock and token cache."""

    config = from_context(provides=Config, scope=Scope.APP)

    @provide(scope=Scope.APP)
    async def get_http_client(self, config: Config) -> AsyncIterable[httpx.AsyncClient]:
        # Per-call deadlines are enforced by DeadlineFetcher; the client only bounds connects
        timeout = httpx.Timeout(None, connect=config.http.connect_timeout)
        limits = httpx.Limits(max_connections=config.http.max_connections)
        client = httpx.AsyncClient(timeout=timeout, limits=limits, follow_redirects=True)
        yield client
        await client.aclose()

    @provide(scope=Scope.APP)
    def get_fetcher(self, client: httpx.AsyncClient, config: Config) -> DeadlineFetcher:
        return DeadlineFetcher(
            client,
            default_timeout=config.http.default_timeout,
            user_agent=config.http.user_agent,
        )

    @provide(scope=Scope.APP, provides=Clock)
    def get_clock(self) -> SystemClock:
        return SystemClock()

    @provide(scope=Scope.APP)
    def get_opensky_token_cache(
        self,
        config: Config,
        fetcher: DeadlineFetcher,
        clock: Clock,
    ) -> OAuth2TokenCache:
        auth = config.opensky
        credentials = ClientCredentials(auth.client_id, auth.client_secret) if auth.configured else None
        return OAuth2TokenCache(
            token_url=auth.token_url,
            credentials=credentials,
            fetcher=fetcher,
            clock=clock,
            timeout=auth.token_timeout,
            expiry_buffer=timedelta(seconds=auth.expiry_buffer_seconds),
        )
