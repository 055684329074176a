"""Shared machinery for HTTP source adapters.

Subclasses implement ``collect()``: issue calls through the helpers below,
validate bodies against pydantic schemas and map them to canonical records.
``fetch()`` wraps ``collect()`` and turns every failure into a typed
SourceResult, so nothing raised by a provider escapes the adapter.
"""

import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, ClassVar, Generic, TypeVar

import httpx
import logfire
from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaValidationError

from observatory.domain.shared.error import (
    AuthError,
    ConfigurationError,
    FetchTimeoutError,
    HttpStatusError,
    NetworkError,
    ParseError,
    SourceError,
)
from observatory.domain.shared.model.record import CanonicalEvent, DerivedMetric
from observatory.domain.shared.model.source import SourceOutcome, SourceResult
from observatory.domain.shared.port.clock import Clock
from observatory.infrastructure.auth.token_cache import OAuth2TokenCache
from observatory.infrastructure.http.fetcher import DeadlineFetcher, FetchFailure
from observatory.sdk.source.config import SourceConfig

logger = logging.getLogger(__name__)

ConfigT = TypeVar("ConfigT", bound=SourceConfig)


@dataclass
class SourcePayload:
    """Canonical records produced by one collect() call."""

    events: list[CanonicalEvent] = field(default_factory=list)
    metrics: list[DerivedMetric] = field(default_factory=list)


@dataclass(frozen=True)
class SourceContext:
    """Shared collaborators handed to every adapter at construction."""

    fetcher: DeadlineFetcher
    clock: Clock
    token_caches: Mapping[str, OAuth2TokenCache] = field(default_factory=dict)


@lru_cache(maxsize=None)
def _type_adapter(schema: Any) -> TypeAdapter:
    return TypeAdapter(schema)


def parse_body(response: httpx.Response, schema: Any, *, require_json_content_type: bool = False) -> Any:
    """Decode a JSON body and validate it against ``schema``.

    Raises:
        ParseError: If the body is not JSON or does not match the schema.
    """
    if require_json_content_type:
        content_type = response.headers.get("content-type", "")
        if "application/json" not in content_type:
            raise ParseError(f"Expected JSON, got content-type '{content_type or 'none'}'")

    try:
        raw = response.json()
    except ValueError as e:
        snippet = response.text[:50].replace("\n", " ")
        raise ParseError(f"Response body is not valid JSON: {snippet!r}") from e

    try:
        return _type_adapter(schema).validate_python(raw)
    except SchemaValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first.get("loc", ())) or "<root>"
        raise ParseError(
            f"Unexpected response shape ({e.error_count()} errors, first at {location}: {first.get('msg')})"
        ) from e


class HttpSourceAdapter(ABC, Generic[ConfigT]):
    """Base class for adapters that read one or more JSON HTTP endpoints."""

    name: ClassVar[str]
    config_class: ClassVar[type[SourceConfig]] = SourceConfig

    def __init__(
        self,
        config: ConfigT,
        fetcher: DeadlineFetcher,
        clock: Clock,
        source_id: str | None = None,
    ) -> None:
        self._config = config
        self._fetcher = fetcher
        self._clock = clock
        self._source_id = source_id or self.name

    @classmethod
    def from_context(
        cls,
        config: SourceConfig,
        context: SourceContext,
        source_id: str | None = None,
    ) -> "HttpSourceAdapter":
        return cls(config, context.fetcher, context.clock, source_id)

    @property
    def source_id(self) -> str:
        return self._source_id

    @property
    def config(self) -> ConfigT:
        return self._config

    async def fetch(self) -> SourceResult:
        started = time.perf_counter()
        try:
            payload = await self.collect()
        except SourceError as e:
            elapsed = _elapsed_ms(started)
            logfire.warn(
                "Source failed",
                source=self.source_id,
                outcome=e.outcome.value,
                error=e.message,
            )
            return SourceResult.failure(
                self.source_id,
                e.outcome,
                e.message,
                http_status=getattr(e, "status_code", None),
                elapsed_ms=elapsed,
            )
        except (SchemaValidationError, KeyError, IndexError, TypeError, ValueError) as e:
            elapsed = _elapsed_ms(started)
            logger.warning("Normalization failed for %s: %r", self.source_id, e)
            return SourceResult.failure(
                self.source_id,
                SourceOutcome.PARSE_ERROR,
                f"Could not normalize provider data: {e!r}",
                elapsed_ms=elapsed,
            )
        except Exception as e:
            elapsed = _elapsed_ms(started)
            logger.exception("Unexpected error in source adapter %s", self.source_id)
            return SourceResult.failure(
                self.source_id,
                SourceOutcome.PARSE_ERROR,
                f"Unexpected adapter error: {e!r}",
                elapsed_ms=elapsed,
            )

        limit = self._config.limit
        events = payload.events[:limit]
        metrics = payload.metrics[:limit]
        if len(payload.events) > limit:
            logger.debug("%s: truncated %d events to %d", self.source_id, len(payload.events), limit)

        return SourceResult.success(
            self.source_id,
            events=events,
            metrics=metrics,
            elapsed_ms=_elapsed_ms(started),
        )

    @abstractmethod
    async def collect(self) -> SourcePayload:
        """Fetch from the provider and map to canonical records.

        Raise a SourceError subclass for any condition that means "no data".
        """
        ...

    # -------------------------------------------------------------------------
    # Request helpers
    # -------------------------------------------------------------------------

    async def request(self, url: str, **kwargs: Any) -> httpx.Response:
        """Make one guarded call and require a 2xx response.

        Raises:
            FetchTimeoutError: Deadline exceeded.
            NetworkError: Transport failure.
            ConfigurationError: The URL or arguments could not form a request.
            AuthError: Provider answered 401.
            HttpStatusError: Any other non-2xx status.
        """
        kwargs.setdefault("timeout", self._config.timeout)
        result = await self._fetcher.fetch(url, **kwargs)

        if result.response is None:
            if result.failure is FetchFailure.TIMEOUT:
                raise FetchTimeoutError(f"Timed out fetching {url}")
            if result.failure is FetchFailure.INVALID_REQUEST:
                raise ConfigurationError(f"Invalid request to {url!r}: {result.detail}", code="invalid_url")
            raise NetworkError(f"Could not reach {url}: {result.detail}")

        response = result.response
        if response.status_code == 401:
            self.on_unauthorized()
            raise AuthError(f"{self.source_id} rejected credentials (401)", code="unauthorized")
        if not response.is_success:
            raise HttpStatusError(
                f"{self.source_id} returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response

    async def get_json(
        self,
        url: str,
        schema: Any,
        *,
        require_json_content_type: bool = False,
        **kwargs: Any,
    ) -> Any:
        """Guarded call plus schema validation of the JSON body."""
        response = await self.request(url, **kwargs)
        return parse_body(response, schema, require_json_content_type=require_json_content_type)

    async def try_get_json(self, url: str, schema: Any, **kwargs: Any) -> Any | None:
        """Like get_json, for follow-up calls whose failure only degrades fields."""
        try:
            return await self.get_json(url, schema, **kwargs)
        except SourceError as e:
            self.log_degraded(e)
            return None

    def log_degraded(self, error: SourceError) -> None:
        """Record a follow-up failure that drops fields but not the source."""
        logger.info("%s: follow-up call degraded (%s): %s", self.source_id, error.outcome.value, error.message)

    def on_unauthorized(self) -> None:
        """Hook invoked when the provider answers 401. Protected adapters drop their token."""


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
