"""
Timestamp helpers.

All timestamps inside the service are timezone-aware UTC datetimes.
Naive values are assumed to already be UTC.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from dateutil.parser import isoparse

from resource_booking.exceptions import InvalidIntervalError, InvalidTimestampError

Timestamp = Union[datetime, str]


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def parse_timestamp(value: Timestamp) -> datetime:
    """
    Parse an ISO 8601 string (or pass through a datetime) into aware UTC.

    Raises:
        InvalidTimestampError: If the string is not a valid ISO 8601 timestamp
    """
    if isinstance(value, datetime):
        return ensure_utc(value)
    if not isinstance(value, str) or not value.strip():
        raise InvalidTimestampError(str(value))
    try:
        return ensure_utc(isoparse(value.strip()))
    except (ValueError, OverflowError) as e:
        raise InvalidTimestampError(value, e) from e


def parse_optional_timestamp(value: Optional[Timestamp]) -> Optional[datetime]:
    """Like parse_timestamp, but None stays None."""
    if value is None:
        return None
    return parse_timestamp(value)


def parse_interval(start: Timestamp, end: Timestamp) -> tuple[datetime, datetime]:
    """
    Parse and validate a half-open interval [start, end).

    Raises:
        InvalidTimestampError: If either end is unparseable
        InvalidIntervalError: If start is not strictly before end
    """
    start_dt = parse_timestamp(start)
    end_dt = parse_timestamp(end)
    if start_dt >= end_dt:
        raise InvalidIntervalError(start_dt.isoformat(), end_dt.isoformat())
    return start_dt, end_dt


def next_update_time(previous: Optional[datetime]) -> datetime:
    """
    Timestamp for a mutation, strictly later than the previous one.

    Two mutations inside the same clock tick still get ordered values.
    """
    now = utcnow()
    if previous is not None and now <= ensure_utc(previous):
        return ensure_utc(previous) + timedelta(microseconds=1)
    return now


def format_timestamp(dt: Optional[datetime]) -> Optional[str]:
    """Render a datetime as ISO 8601 (UTC)."""
    if dt is None:
        return None
    return ensure_utc(dt).isoformat()
