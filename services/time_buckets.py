"""Calendar bucketing helpers shared by the analytics aggregators.

All helpers are pure. Period keys are returned as aware datetimes in the same
timezone as their input so callers can compare them directly against localized
order timestamps.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta, tzinfo
from typing import Any, List

import pytz

LOGGER = logging.getLogger(__name__)

QUADRANTS = ("morning", "afternoon", "evening", "night")


def resolve_timezone(tz_name: Any) -> tzinfo:
    """Return the ``pytz`` zone for ``tz_name``, falling back to UTC."""
    try:
        return pytz.timezone(str(tz_name) if tz_name else "UTC")
    except pytz.UnknownTimeZoneError:
        LOGGER.warning("Unknown timezone '%s'; falling back to UTC", tz_name)
        return pytz.utc


def localize(value: datetime, tz: tzinfo) -> datetime:
    """Express an aware (or UTC-naive) datetime in ``tz``."""
    if value.tzinfo is None:
        value = pytz.utc.localize(value)
    return value.astimezone(tz)


def _start_of(value: datetime, day: date) -> datetime:
    midnight = datetime(day.year, day.month, day.day)
    tz = value.tzinfo
    if hasattr(tz, "localize"):
        return tz.localize(midnight)
    return midnight.replace(tzinfo=tz)


def classify_quadrant(hour: int) -> str:
    if 6 <= hour < 12:
        return "morning"
    if 12 <= hour < 17:
        return "afternoon"
    if 17 <= hour < 22:
        return "evening"
    return "night"


def empty_quadrants() -> dict:
    return {quadrant: 0 for quadrant in QUADRANTS}


def day_key(value: datetime) -> datetime:
    return _start_of(value, value.date())


def week_key(value: datetime) -> datetime:
    # Weeks start on Sunday.
    offset = (value.weekday() + 1) % 7
    return _start_of(value, value.date() - timedelta(days=offset))


def month_key(value: datetime) -> datetime:
    return _start_of(value, value.date().replace(day=1))


def hour_label(hour: int) -> str:
    return f"{hour:02d}:00"


def short_date_label(day: date) -> str:
    return day.strftime("%b %d")


def iso_date_label(day: date) -> str:
    return day.isoformat()


def trailing_days(now: datetime, count: int) -> List[date]:
    """Return the ``count`` calendar days ending on ``now``'s day, oldest first."""
    today = now.date()
    return [today - timedelta(days=offset) for offset in range(count - 1, -1, -1)]


def days_between(start: date, end: date) -> List[date]:
    """Every day from ``start`` to ``end`` inclusive; empty when reversed."""
    span = (end - start).days
    return [start + timedelta(days=offset) for offset in range(span + 1)]


__all__ = [
    "QUADRANTS",
    "classify_quadrant",
    "day_key",
    "days_between",
    "empty_quadrants",
    "hour_label",
    "iso_date_label",
    "localize",
    "month_key",
    "resolve_timezone",
    "short_date_label",
    "trailing_days",
    "week_key",
]
