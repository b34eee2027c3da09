"""
Calendar helpers for year-month ("YYYY-MM") values.

Months are kept as strings throughout the application because that is how
groups, slots and payments store them; ordering of valid month strings is
the same as chronological ordering.
"""
import calendar
import re
from datetime import date

from app.core.errors import ValidationError

MONTH_PATTERN = re.compile(r"^(\d{4})-(\d{2})$")


def parse_month(value: str) -> tuple[int, int]:
    """
    Split a "YYYY-MM" string into (year, month).

    Raises ValidationError for anything else, including month 00 or 13.
    """
    match = MONTH_PATTERN.match(value) if isinstance(value, str) else None
    if not match:
        raise ValidationError(f"Invalid month '{value}', expected YYYY-MM", {"month": value})
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month '{value}', month must be between 01 and 12", {"month": value})
    return year, month


def format_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def month_index(value: str) -> int:
    year, month = parse_month(value)
    return year * 12 + (month - 1)


def months_between(start: str, end: str) -> int:
    return month_index(end) - month_index(start)


def add_months(value: str, count: int) -> str:
    year, month0 = divmod(month_index(value) + count, 12)
    return format_month(year, month0 + 1)


def validate_range(start: str, end: str) -> None:
    if months_between(start, end) < 0:
        raise ValidationError(
            f"Start month {start} is after end month {end}",
            {"start_date": start, "end_date": end},
        )


def expand_months(start: str, end: str) -> list[str]:
    """
    Every month from `start` to `end`, inclusive and in ascending order.
    """
    validate_range(start, end)
    first = month_index(start)
    return [
        format_month(*_split(index))
        for index in range(first, month_index(end) + 1)
    ]


def _split(index: int) -> tuple[int, int]:
    year, month0 = divmod(index, 12)
    return year, month0 + 1


def month_in_range(value: str, start: str, end: str) -> bool:
    return month_index(start) <= month_index(value) <= month_index(end)


def month_of(day: date) -> str:
    return format_month(day.year, day.month)


def display_month(value: str) -> str:
    """YYYY-MM -> MM-YYYY"""
    year, month = parse_month(value)
    return f"{month:02d}-{year:04d}"


def payment_deadline(month: str, deadline_day: int) -> date:
    """
    The deadline date inside `month`; days past the month's end clamp to its last day.
    """
    year, mon = parse_month(month)
    last_day = calendar.monthrange(year, mon)[1]
    return date(year, mon, min(max(deadline_day, 1), last_day))
