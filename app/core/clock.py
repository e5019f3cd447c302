"""UTC time helpers shared by persistence and quota accounting.

All timestamps are stored as naive UTC datetimes, so every helper here returns
naive values in UTC.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_naive_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed UTC."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def start_of_utc_day(now: datetime | None = None) -> datetime:
    current = as_naive_utc(now) if now is not None else utcnow()
    return current.replace(hour=0, minute=0, second=0, microsecond=0)


def next_utc_midnight(now: datetime | None = None) -> datetime:
    return start_of_utc_day(now) + timedelta(days=1)


def iso_utc(value: datetime) -> str:
    """ISO-8601 with a trailing Z, e.g. 2025-01-02T00:00:00.000Z."""
    return as_naive_utc(value).isoformat(timespec="milliseconds") + "Z"
