"""Datetime utility functions."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return current UTC time."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Return a timestamp as aware UTC; naive values are taken to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)
