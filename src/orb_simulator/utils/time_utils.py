"""Time and timezone utility functions."""

from datetime import date, datetime, time, timedelta, timezone as dt_timezone

import pytz

EXCHANGE_TZ = "America/New_York"
MS_PER_MINUTE = 60_000


def session_time_ms(day: date, at: time, tz_name: str = EXCHANGE_TZ) -> int:
    """Epoch milliseconds of a wall-clock time on a given exchange date.

    Args:
        day: Calendar date.
        at: Local wall-clock time (e.g. 09:30).
        tz_name: Exchange timezone name.

    Returns:
        Epoch milliseconds (UTC).
    """
    tz = pytz.timezone(tz_name)
    local_dt = tz.localize(datetime.combine(day, at))
    return int(local_dt.timestamp() * 1000)


def ms_to_datetime(ms: int) -> datetime:
    """Convert epoch milliseconds to an aware UTC datetime."""
    return datetime.fromtimestamp(ms / 1000, tz=dt_timezone.utc)


def ms_to_exchange_date(ms: int, tz_name: str = EXCHANGE_TZ) -> date:
    """Exchange-local calendar date of an epoch-millisecond timestamp."""
    return ms_to_datetime(ms).astimezone(pytz.timezone(tz_name)).date()


def is_weekend(day: date) -> bool:
    """True for Saturday and Sunday."""
    return day.weekday() >= 5


def business_days(start: date, count: int):
    """Yield ``count`` weekday dates starting at ``start``.

    Weekend dates are skipped before each yielded day; the calendar then
    advances by one day.
    """
    current = start
    for _ in range(count):
        while is_weekend(current):
            current += timedelta(days=1)
        yield current
        current += timedelta(days=1)
