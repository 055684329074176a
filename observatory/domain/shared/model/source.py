"""Outcome of invoking one source adapter."""

from enum import StrEnum

from pydantic import Field

from observatory.domain.shared.model.record import CanonicalEvent, DerivedMetric
from observatory.domain.shared.model.value import ValueObject


class SourceOutcome(StrEnum):
    SUCCESS = "success"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    PARSE_ERROR = "parse_error"
    AUTH_ERROR = "auth_error"
    HTTP_ERROR = "http_error"
    CONFIG_ERROR = "config_error"


class SourceResult(ValueObject):
    """Always produced for every adapter invocation, success or typed failure."""

    source_id: str
    outcome: SourceOutcome
    events: list[CanonicalEvent] = Field(default_factory=list)
    metrics: list[DerivedMetric] = Field(default_factory=list)
    http_status: int | None = None  # set for http_error
    error: str | None = None
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.outcome is SourceOutcome.SUCCESS

    @classmethod
    def success(
        cls,
        source_id: str,
        events: list[CanonicalEvent] | None = None,
        metrics: list[DerivedMetric] | None = None,
        elapsed_ms: float = 0.0,
    ) -> "SourceResult":
        return cls(
            source_id=source_id,
            outcome=SourceOutcome.SUCCESS,
            events=events or [],
            metrics=metrics or [],
            elapsed_ms=elapsed_ms,
        )

    @classmethod
    def failure(
        cls,
        source_id: str,
        outcome: SourceOutcome,
        error: str,
        http_status: int | None = None,
        elapsed_ms: float = 0.0,
    ) -> "SourceResult":
        if outcome is SourceOutcome.SUCCESS:
            raise ValueError("failure() requires a failure outcome")
        return cls(
            source_id=source_id,
            outcome=outcome,
            error=error,
            http_status=http_status,
            elapsed_ms=elapsed_ms,
        )
