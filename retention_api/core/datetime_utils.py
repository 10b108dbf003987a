from datetime import UTC, datetime
from typing import Annotated

from pydantic.functional_serializers import PlainSerializer


def utcnow() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _serialize_utc_datetime(v: datetime | None) -> str | None:
    # Millisecond precision with a Z suffix, e.g. 2025-06-01T12:00:00.000Z
    if v is None:
        return None
    return as_utc(v).isoformat(timespec="milliseconds").replace("+00:00", "Z")


UTCDatetime = Annotated[datetime, PlainSerializer(_serialize_utc_datetime)]
