"""OAuth2 client-credentials token cache.

One instance per protected provider, owned by the DI container for the
lifetime of the process:

    empty --get()--> valid --(expiry buffer reached)--> expiring --get()--> valid
      ^                                                                        |
      +----------------------------- invalidate() ----------------------------+

Concurrent refreshes are not serialized. Two coroutines that both observe an
expiring token will both exchange credentials; the last one to finish wins.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum

from observatory.domain.shared.error import AuthError, ConfigurationError, FetchTimeoutError, NetworkError
from observatory.domain.shared.port.clock import Clock
from observatory.infrastructure.http.fetcher import DeadlineFetcher, FetchFailure

logger = logging.getLogger(__name__)

DEFAULT_EXPIRY_BUFFER = timedelta(seconds=60)
DEFAULT_TOKEN_TIMEOUT = 8.0


class TokenState(StrEnum):
    EMPTY = "empty"
    VALID = "valid"
    EXPIRING = "expiring"


@dataclass(frozen=True)
class ClientCredentials:
    client_id: str
    client_secret: str


@dataclass(frozen=True)
class _CachedToken:
    access_token: str
    expires_at: datetime


class OAuth2TokenCache:
    """Caches a bearer token and refreshes it ahead of expiry."""

    def __init__(
        self,
        token_url: str,
        credentials: ClientCredentials | None,
        fetcher: DeadlineFetcher,
        clock: Clock,
        timeout: float = DEFAULT_TOKEN_TIMEOUT,
        expiry_buffer: timedelta = DEFAULT_EXPIRY_BUFFER,
    ) -> None:
        self._token_url = token_url
        self._credentials = credentials
        self._fetcher = fetcher
        self._clock = clock
        self._timeout = timeout
        self._expiry_buffer = expiry_buffer
        self._token: _CachedToken | None = None

    @property
    def configured(self) -> bool:
        return self._credentials is not None

    @property
    def state(self) -> TokenState:
        if self._token is None:
            return TokenState.EMPTY
        if self._is_fresh(self._token):
            return TokenState.VALID
        return TokenState.EXPIRING

    @property
    def expires_at(self) -> datetime | None:
        return self._token.expires_at if self._token else None

    async def get(self) -> str:
        """Return a usable bearer token, exchanging credentials if needed.

        Raises:
            ConfigurationError: If no client credentials are configured or the token URL is malformed.
            AuthError: If the identity provider rejects the exchange.
            FetchTimeoutError: If the token endpoint does not answer in time.
            NetworkError: If the token endpoint is unreachable.
        """
        cached = self._token
        if cached is not None and self._is_fresh(cached):
            logger.debug("Using cached token for %s", self._token_url)
            return cached.access_token

        if self._credentials is None:
            raise ConfigurationError(
                "OAuth2 client credentials not configured",
                code="missing_credentials",
            )

        self._token = await self._exchange(self._credentials)
        return self._token.access_token

    def invalidate(self) -> None:
        """Drop the cached token so the next get() re-authenticates."""
        if self._token is not None:
            logger.info("Invalidating cached token for %s", self._token_url)
        self._token = None

    def _is_fresh(self, token: _CachedToken) -> bool:
        return token.expires_at - self._clock.now() > self._expiry_buffer

    async def _exchange(self, credentials: ClientCredentials) -> _CachedToken:
        logger.info("Requesting new OAuth2 token from %s", self._token_url)
        result = await self._fetcher.fetch(
            self._token_url,
            method="POST",
            data={
                "grant_type": "client_credentials",
                "client_id": credentials.client_id,
                "client_secret": credentials.client_secret,
            },
            timeout=self._timeout,
        )

        if result.response is None:
            if result.failure is FetchFailure.TIMEOUT:
                raise FetchTimeoutError("Token request timed out", code="token_timeout")
            if result.failure is FetchFailure.INVALID_REQUEST:
                raise ConfigurationError(f"Invalid token URL: {result.detail}", code="invalid_token_url")
            raise NetworkError(f"Token endpoint unreachable: {result.detail}", code="token_unreachable")

        response = result.response
        if not response.is_success:
            logger.error(
                "OAuth2 token exchange failed: status=%d, body=%s",
                response.status_code,
                response.text[:200],
            )
            raise AuthError(f"Token exchange failed: {response.status_code}", code="token_rejected")

        try:
            payload = response.json()
            access_token = str(payload["access_token"])
            expires_in = float(payload["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            raise AuthError("Token response missing access_token/expires_in", code="token_malformed") from e

        expires_at = self._clock.now() + timedelta(seconds=expires_in)
        logger.info("Obtained OAuth2 token, expires at %s", expires_at.isoformat())
        return _CachedToken(access_token=access_token, expires_at=expires_at)
