"""Expiration decision for stored objects."""

from datetime import datetime

from retention_api.core.datetime_utils import as_utc, utcnow
from retention_api.core.exceptions import ValidationError
from retention_api.retention.models import validate_max_age


def parse_timestamp(value: datetime | str | None) -> datetime:
    """Return a timezone-aware datetime, treating naive values as UTC.

    Raises:
        ValidationError: If the value is missing or cannot be parsed.
    """
    if value is None:
        raise ValidationError("Object has no creation timestamp", field="created_at")

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(
                f"Unparseable creation timestamp: {value!r}", field="created_at"
            ) from None
    else:
        raise ValidationError(
            f"Unsupported creation timestamp type: {type(value).__name__}", field="created_at"
        )

    return as_utc(parsed)


def is_expired(
    created_at: datetime | str | None,
    max_age_minutes: float,
    now: datetime | None = None,
) -> bool:
    """Return True iff the object's age in minutes is strictly greater than max_age_minutes.

    An object whose age equals the threshold exactly is not expired.
    """
    max_age = validate_max_age(max_age_minutes)
    created = parse_timestamp(created_at)

    now = utcnow() if now is None else as_utc(now)

    age_minutes = (now - created).total_seconds() / 60
    return age_minutes > max_age
