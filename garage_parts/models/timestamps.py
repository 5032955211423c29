"""Timestamp handling shared by the models."""

from datetime import datetime, timezone
from typing import Annotated

from pydantic import AfterValidator


def to_naive_utc(value: datetime) -> datetime:
    """Convert an offset-aware datetime to naive UTC; naive values are taken as UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# All stored timestamps are naive UTC, matching datetime.utcnow()
UtcDatetime = Annotated[datetime, AfterValidator(to_naive_utc)]
