# utils.py
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

import config

APP_TZ = ZoneInfo(config.APP_TIMEZONE)


def utc_now() -> datetime:
    # Naive UTC, matching what the DateTime columns store
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_local(dt):
    # Convert any datetime (naive=assumed UTC; aware=converted) to APP_TIMEZONE
    if not dt:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(APP_TZ)


def local_date(dt: datetime) -> date:
    """Calendar day of a naive-UTC timestamp in APP_TIMEZONE."""
    return to_local(dt).date()


def daterange(start: date, end: date):
    """Every calendar day from start to end, inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def hours_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / 3600
