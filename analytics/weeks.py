"""
Calendar helpers for week bucketing and date windows
"""

from calendar import monthrange
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional, Union
import math


def week_start_for(day: date, week_start_day: int = 0) -> date:
    """
    First day of the week containing ``day``.

    Args:
        day: Any date
        week_start_day: Weekday the week starts on (0=Monday ... 6=Sunday)
    """
    offset = (day.weekday() - week_start_day) % 7
    return day - timedelta(days=offset)


def days_between(start: date, end: date) -> List[date]:
    """Every date from start to end, inclusive."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def weeks_spanned(start: date, end: date) -> int:
    """Number of 7-day blocks needed to cover [start, end]; at least 1."""
    return max(1, math.ceil(((end - start).days + 1) / 7))


def subtract_months(day: date, months: int) -> date:
    """Same day-of-month ``months`` earlier, clamped to the month's last day."""
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    return date(year, month, min(day.day, monthrange(year, month)[1]))


def to_date(value: Union[date, datetime, str, None]) -> Optional[date]:
    """
    Calendar date of a timestamp.

    Aware datetimes are converted to UTC first so the date matches the
    date portion of the ISO timestamp the source sent.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None
