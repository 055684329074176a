"""Deadline-guarded HTTP fetch shared by every source adapter.

Every outbound provider call goes through ``DeadlineFetcher.fetch``. The call
is raced against its deadline; timeouts, transport failures and requests that
cannot be built are logged and reported in the returned ``FetchResult``
instead of being raised.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "Observatory Dashboard/1.0"


class FetchFailure(StrEnum):
    TIMEOUT = "timeout"
    NETWORK = "network"
    INVALID_REQUEST = "invalid_request"  # URL or arguments rejected before sending


@dataclass(frozen=True)
class FetchResult:
    """Uniform result of one guarded call.

    ``response`` is set whenever the provider answered, whatever the status
    code. It is None when the deadline passed or the transport failed, and
    ``failure`` says which.
    """

    url: str
    response: httpx.Response | None
    failure: FetchFailure | None = None
    elapsed_ms: float = 0.0
    detail: str | None = None

    @property
    def ok(self) -> bool:
        """True if a response arrived with a 2xx status."""
        return self.response is not None and self.response.is_success


class DeadlineFetcher:
    """Races a single httpx request against a deadline.

    The losing side is abandoned: on timeout the request task is cancelled,
    which httpx honours by closing the connection.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        default_timeout: float = 10.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._client = client
        self._default_timeout = default_timeout
        self._user_agent = user_agent

    @property
    def default_timeout(self) -> float:
        return self._default_timeout

    async def fetch(
        self,
        url: str,
        *,
        method: str = "GET",
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        data: dict[str, Any] | None = None,
        json: Any = None,
        timeout: float | None = None,
    ) -> FetchResult:
        deadline = timeout if timeout is not None else self._default_timeout
        merged = self._with_default_headers(headers)
        started = time.perf_counter()

        try:
            response = await asyncio.wait_for(
                self._client.request(
                    method,
                    url,
                    params=params,
                    headers=merged,
                    data=data,
                    json=json,
                ),
                timeout=deadline,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            elapsed = _elapsed_ms(started)
            logger.warning("Request timed out after %.0fms (deadline %.1fs): %s", elapsed, deadline, url)
            return FetchResult(
                url=url,
                response=None,
                failure=FetchFailure.TIMEOUT,
                elapsed_ms=elapsed,
                detail=str(e) or "deadline exceeded",
            )
        except httpx.HTTPError as e:
            elapsed = _elapsed_ms(started)
            logger.warning("Request failed after %.0fms: %s (%s)", elapsed, url, e)
            return FetchResult(
                url=url,
                response=None,
                failure=FetchFailure.NETWORK,
                elapsed_ms=elapsed,
                detail=str(e) or e.__class__.__name__,
            )
        except (httpx.InvalidURL, ValueError) as e:
            # Raised while building the request, e.g. a malformed configured URL
            elapsed = _elapsed_ms(started)
            logger.error("Request could not be built for %r: %s", url, e)
            return FetchResult(
                url=url,
                response=None,
                failure=FetchFailure.INVALID_REQUEST,
                elapsed_ms=elapsed,
                detail=str(e) or e.__class__.__name__,
            )

        elapsed = _elapsed_ms(started)
        logger.debug("%s %s -> %d in %.0fms", method, url, response.status_code, elapsed)
        return FetchResult(url=url, response=response, elapsed_ms=elapsed)

    def _with_default_headers(self, headers: dict[str, str] | None) -> httpx.Headers:
        merged = httpx.Headers(headers or {})
        if "user-agent" not in merged:
            merged["User-Agent"] = self._user_agent
        if "accept" not in merged:
            merged["Accept"] = "application/json"
        return merged


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000
