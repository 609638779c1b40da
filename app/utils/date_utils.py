# app/utils/date_utils.py
"""
Date utility functions for the Net Worth Tracker.

Shared calendar arithmetic used by the period resolver and the
performance calculators. Month and year arithmetic clamps to the last
valid day of the target month (Mar 31 minus one month is the last day
of February).

Usage:
    from app.utils.date_utils import get_calendar_days, subtract_months

    days = get_calendar_days(start_date, end_date)
"""

import calendar
from datetime import date, datetime, timedelta


def get_calendar_days(start_date: date, end_date: date) -> list[date]:
    """
    Get every calendar day in a date range, weekends included.

    Args:
        start_date: First date in range (inclusive)
        end_date: Last date in range (inclusive)

    Returns:
        List of dates sorted chronologically (empty if start > end)

    Example:
        >>> get_calendar_days(date(2024, 1, 30), date(2024, 2, 1))
        [date(2024, 1, 30), date(2024, 1, 31), date(2024, 2, 1)]
    """
    days = []
    current = start_date

    while current <= end_date:
        days.append(current)
        current += timedelta(days=1)

    return days


def subtract_months(d: date, months: int) -> date:
    """
    Move a date back by a number of calendar months.

    Args:
        d: Reference date
        months: Number of months to go back (>= 0)

    Returns:
        Same day-of-month in the target month, clamped to its last day
    """
    month_index = d.year * 12 + (d.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(d.day, last_day))


def subtract_years(d: date, years: int) -> date:
    """Move a date back by whole years (Feb 29 becomes Feb 28 when needed)."""
    return subtract_months(d, years * 12)


def to_date(value: date | datetime | str) -> date:
    """
    Normalize a date-like value to a date.

    Accepts date, datetime, or an ISO string with or without a time
    component ("2024-01-05", "2024-01-05T00:00:00.000Z").

    Raises:
        ValueError: If the string is not an ISO date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    return date.fromisoformat(text[:10])
