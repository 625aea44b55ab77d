from __future__ import annotations

import re
from datetime import date, datetime, timedelta
from typing import List, Tuple, Union

DateLike = Union[date, datetime, str]

_ISO_DAY = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Sunday-first, matching the calendar grid
DAYS_OF_WEEK = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

CALENDAR_CELLS = 42


class InvalidDateError(ValueError):
    """Raised when a value is not a valid YYYY-MM-DD calendar day."""


# PUBLIC_INTERFACE
def parse_iso_date(value: str) -> date:
    """
    Parse a strict 'YYYY-MM-DD' string into a date.

    Raises:
        InvalidDateError if the string does not match the format or names a
        day that does not exist (e.g. '2024-13-40', '2023-02-29').
    """
    if not isinstance(value, str) or not _ISO_DAY.match(value):
        raise InvalidDateError("Invalid date format. Use YYYY-MM-DD")
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise InvalidDateError("Invalid date format. Use YYYY-MM-DD") from e


# PUBLIC_INTERFACE
def as_date(value: DateLike) -> date:
    """Normalize a date, datetime or ISO string to a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_iso_date(value[:10])


def is_same_day(a: DateLike, b: DateLike) -> bool:
    return as_date(a) == as_date(b)


def first_of_month(day: DateLike) -> date:
    d = as_date(day)
    return d.replace(day=1)


def add_months(day: DateLike, months: int) -> date:
    """Shift to the first day of the month `months` away from `day`."""
    d = first_of_month(day)
    index = d.year * 12 + (d.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


# PUBLIC_INTERFACE
def month_boundaries(day: DateLike) -> Tuple[date, date]:
    """Return (first, last) day of the month containing `day`."""
    start = first_of_month(day)
    end = add_months(start, 1) - timedelta(days=1)
    return start, end


# PUBLIC_INTERFACE
def week_boundaries(day: DateLike) -> Tuple[date, date]:
    """Return (Sunday, Saturday) of the week containing `day`."""
    d = as_date(day)
    # date.weekday(): Monday == 0 ... Sunday == 6
    offset = (d.weekday() + 1) % 7
    start = d - timedelta(days=offset)
    return start, start + timedelta(days=6)


# PUBLIC_INTERFACE
def month_grid(month: DateLike) -> List[date]:
    """
    Return the 42 days (6 rows x 7 columns, Sunday first) shown for a month,
    padded with trailing days of the previous month and leading days of the next.
    """
    first = first_of_month(month)
    start, _ = week_boundaries(first)
    return [start + timedelta(days=i) for i in range(CALENDAR_CELLS)]


def format_date(day: DateLike) -> str:
    """'May 1, 2024'"""
    d = as_date(day)
    return f"{d:%b} {d.day}, {d.year}"


def format_date_full(day: DateLike) -> str:
    """'May 1, 2024' with the full month name"""
    d = as_date(day)
    return f"{d:%B} {d.day}, {d.year}"


def format_month_year(day: DateLike) -> str:
    d = as_date(day)
    return f"{d:%B} {d.year}"


def format_currency(amount: float) -> str:
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
