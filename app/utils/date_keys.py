"""
Business-day date keys.

A day in the app does not start at midnight: it starts at
settings.DAY_CUTOFF_HOUR in settings.DAY_TIMEZONE. Daily questions, nudges,
journal entries and mood check-ins are all keyed by the resulting
"YYYY-MM-DD" string, so keys sort chronologically as plain strings.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional

import pytz

from app.config import settings

DATE_KEY_FORMAT = "%Y-%m-%d"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def business_date(now: Optional[datetime] = None) -> date:
    """Calendar date of the business day `now` falls in."""
    now = now or utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    local = now.astimezone(pytz.timezone(settings.DAY_TIMEZONE))
    if local.hour < settings.DAY_CUTOFF_HOUR:
        return local.date() - timedelta(days=1)
    return local.date()


def local_date(now: Optional[datetime] = None) -> date:
    """Calendar date in the day timezone, ignoring the cutoff hour."""
    now = now or utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(pytz.timezone(settings.DAY_TIMEZONE)).date()


def business_date_key(now: Optional[datetime] = None) -> str:
    return date_key_for(business_date(now))


def date_key_for(value: date) -> str:
    return value.strftime(DATE_KEY_FORMAT)


def parse_date_key(key: str) -> date:
    return datetime.strptime(key, DATE_KEY_FORMAT).date()


def shift_date_key(key: str, days: int) -> str:
    return date_key_for(parse_date_key(key) + timedelta(days=days))


def date_keys_between(start_key: str, end_key: str) -> list[str]:
    """Every date key from start_key to end_key, both inclusive, oldest first."""
    start, end = parse_date_key(start_key), parse_date_key(end_key)
    return [date_key_for(start + timedelta(days=i)) for i in range((end - start).days + 1)]


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a timestamp to UTC; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
