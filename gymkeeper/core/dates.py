"""
Calendar helpers for month keys and membership durations
"""

from datetime import date, timedelta
from typing import Iterator, Tuple
import calendar

from gymkeeper.core.exceptions import ValidationError


def add_months(source: date, months: int) -> date:
    """Add calendar months, clamping the day to the target month's length"""
    month = source.month - 1 + int(months)
    year = source.year + month // 12
    month = month % 12 + 1
    day = min(source.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def parse_month(value: str) -> Tuple[int, int]:
    """Parse a ``YYYY-MM`` key into (year, month) with month in 1..12"""
    try:
        year_part, month_part = value.split("-")
        year, month = int(year_part), int(month_part)
    except (AttributeError, ValueError):
        raise ValidationError("Month must be formatted as YYYY-MM", fields={"month": value})

    if not 1 <= month <= 12 or year < 1:
        raise ValidationError("Month must be formatted as YYYY-MM", fields={"month": value})
    return year, month


def format_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """First and last calendar day of the month"""
    return date(year, month, 1), date(year, month, days_in_month(year, month))


def iter_days(start: date, end: date) -> Iterator[date]:
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def days_elapsed_in_month(year: int, month: int, today: date) -> int:
    """Days of the month that have already started as of ``today``.

    Past months count in full, the current month counts up to and including
    today, future months count zero.
    """
    if (year, month) < (today.year, today.month):
        return days_in_month(year, month)
    if (year, month) == (today.year, today.month):
        return today.day
    return 0
