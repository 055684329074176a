"""Maps Observatory errors raised outside adapters to HTTPException responses."""

from typing import Any

from fastapi import HTTPException

from observatory.domain.shared.error import (
    DomainError,
    InfrastructureError,
    ObservatoryError,
    ValidationError,
)

DOMAIN_ERROR_STATUS_MAP: dict[type[DomainError], int] = {
    ValidationError: 422,
}


def map_observatory_error(error: ObservatoryError) -> HTTPException:
    """Map an Observatory error to an HTTPException.

    Args:
        error: The error to map.

    Returns:
        HTTPException with appropriate status code and detail.
    """
    detail: dict[str, Any] = {
        "code": error.code,
        "message": error.message,
    }

    if isinstance(error, InfrastructureError):
        return HTTPException(status_code=503, detail=detail)

    if isinstance(error, DomainError):
        status_code = DOMAIN_ERROR_STATUS_MAP.get(type(error), 400)
        if isinstance(error, ValidationError) and error.field is not None:
            detail["field"] = error.field
        return HTTPException(status_code=status_code, detail=detail)

    return HTTPException(status_code=500, detail=detail)
