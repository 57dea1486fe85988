"""
Timestamp helpers.

Every timestamp in the ledger is an integer count of milliseconds since the
Unix epoch, in UTC.
"""

from datetime import datetime, time, timedelta, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return from_datetime(datetime.now(timezone.utc))


def from_datetime(value: datetime) -> int:
    """Convert a datetime to epoch milliseconds. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return (value - EPOCH) // timedelta(milliseconds=1)


def to_datetime(timestamp: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return EPOCH + timedelta(milliseconds=timestamp)


def start_of_day(timestamp: int) -> int:
    """First millisecond of the UTC day containing ``timestamp``."""
    day = to_datetime(timestamp).date()
    return from_datetime(datetime.combine(day, time.min, tzinfo=timezone.utc))


def end_of_day(timestamp: int) -> int:
    """Last millisecond of the UTC day containing ``timestamp``."""
    return start_of_day(timestamp) + 86_400_000 - 1
