from datetime import UTC, datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict


class ValueObject(BaseModel):
    model_config = ConfigDict(frozen=True)


def as_utc(value: datetime) -> datetime:
    """Normalize a datetime to UTC. Naive values are taken to already be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


# Datetime field that is always timezone-aware UTC after validation
UtcDatetime = Annotated[datetime, AfterValidator(as_utc)]
