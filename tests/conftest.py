"""Global test fixtures."""

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import httpx
import logfire
import pytest

from observatory.infrastructure.http.fetcher import DeadlineFetcher
from observatory.infrastructure.source.base import SourceContext

# Spans and logs stay local during tests
logfire.configure(send_to_logfire=False, console=False)

T0 = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime = T0) -> None:
        self._now = now

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)


Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_fetcher() -> Callable[..., DeadlineFetcher]:
    """Build a DeadlineFetcher whose client answers through ``handler``."""

    def factory(handler: Handler, default_timeout: float = 1.0) -> DeadlineFetcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return DeadlineFetcher(client, default_timeout=default_timeout)

    return factory


@pytest.fixture
def make_context(make_fetcher, clock) -> Callable[..., SourceContext]:
    def factory(handler: Handler, **token_caches) -> SourceContext:
        return SourceContext(fetcher=make_fetcher(handler), clock=clock, token_caches=token_caches)

    return factory


def route(table: dict[str, httpx.Response | Callable[[httpx.Request], httpx.Response]]) -> Handler:
    """Handler dispatching on URL path; unknown paths answer 404."""

    def handler(request: httpx.Request) -> httpx.Response:
        answer = table.get(request.url.path)
        if answer is None:
            return httpx.Response(404, json={"error": "not found"})
        return answer(request) if callable(answer) else answer

    return handler


@pytest.fixture
def router() -> Callable[..., Handler]:
    return route


@pytest.fixture
def restore_logging():
    """Drop handlers installed by configure_logging and restore the root level."""
    root = logging.getLogger()
    level = root.level
    yield
    for handler in root.handlers[:]:
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
