"""Error hierarchy for Observatory.

Error layers:
- ObservatoryError: Base class for all Observatory errors
- DomainError: Invalid requests and business rule violations (4xx responses)
- InfrastructureError: System-level failures like upstream or config issues (503 responses)

SourceError subclasses describe why a single provider produced no data. They are
raised inside source adapters and converted to a SourceResult at the adapter
boundary; they never reach the pipeline or the HTTP layer.
"""

from typing import ClassVar

from observatory.domain.shared.model.source import SourceOutcome


class ObservatoryError(Exception):
    """Base class for all Observatory errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (invalid input - typically 4xx)
# =============================================================================


class DomainError(ObservatoryError):
    """Base class for domain/business errors."""


class ValidationError(DomainError):
    """Input validation failed."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


# =============================================================================
# Infrastructure Errors (system-level failures - typically 503)
# =============================================================================


class InfrastructureError(ObservatoryError):
    """Base class for infrastructure/system errors."""


class SourceError(InfrastructureError):
    """A single external provider could not deliver usable data."""

    outcome: ClassVar[SourceOutcome] = SourceOutcome.NETWORK_ERROR


class FetchTimeoutError(SourceError):
    """Deadline exceeded before the provider answered."""

    outcome = SourceOutcome.TIMEOUT


class NetworkError(SourceError):
    """Transport failure (DNS, connect, reset)."""

    outcome = SourceOutcome.NETWORK_ERROR


class HttpStatusError(SourceError):
    """Provider answered with a non-2xx status."""

    outcome = SourceOutcome.HTTP_ERROR

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message, code="http_error")
        self.status_code = status_code


class ParseError(SourceError):
    """Body was not valid JSON or did not match the expected schema."""

    outcome = SourceOutcome.PARSE_ERROR


class AuthError(SourceError):
    """Credential exchange failed or the provider rejected the token."""

    outcome = SourceOutcome.AUTH_ERROR


class ConfigurationError(SourceError):
    """Required configuration (e.g. credentials) is absent."""

    outcome = SourceOutcome.CONFIG_ERROR
