"""
Months Module

Month arithmetic on "YYYY-MM" strings. Lexical order of these strings
equals chronological order, so comparisons stay on plain strings.
"""

import re
from datetime import date
from typing import List, Optional, Tuple

MONTH_PATTERN = re.compile(r'^(\d{4})-(\d{2})$')


class MonthRangeError(ValueError):
    """Raised when a month range ends before it starts."""

    def __init__(self, start: str, end: str, message: str = None):
        self.start = start
        self.end = end
        self.message = message or "結束年月不能早於起始年月"
        super().__init__(self.message)


def parse_month(value: str) -> Tuple[int, int]:
    """
    Parse "YYYY-MM" into (year, month).

    Raises:
        ValueError: If the string is not a valid month
    """
    match = MONTH_PATTERN.match(value or "")
    if not match:
        raise ValueError(f"Invalid month format: {value}. Expected YYYY-MM")

    year = int(match.group(1))
    month = int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month: {month}")
    return year, month


def format_month(year: int, month: int) -> str:
    return f"{year:04d}-{month:02d}"


def shift_month(value: str, delta: int) -> str:
    """Move a month forward (positive delta) or backward."""
    year, month = parse_month(value)
    index = year * 12 + (month - 1) + delta
    return format_month(index // 12, index % 12 + 1)


def next_month(value: str) -> str:
    return shift_month(value, 1)


def current_month(today: Optional[date] = None) -> str:
    today = today or date.today()
    return format_month(today.year, today.month)


def get_recent_months(count: int, today: Optional[date] = None) -> List[str]:
    """The ``count`` months ending with the current one, oldest first."""
    latest = current_month(today)
    return [shift_month(latest, -offset) for offset in range(count - 1, -1, -1)]


def get_months_between(start: str, end: str) -> List[str]:
    """Inclusive list of months from start to end; empty when start > end."""
    parse_month(start)
    parse_month(end)
    months = []
    current = start
    while current <= end:
        months.append(current)
        current = next_month(current)
    return months


def validate_month_range(start: str, end: str) -> None:
    """
    Check a user-selected month range.

    Raises:
        ValueError: If either bound is malformed
        MonthRangeError: If end precedes start
    """
    parse_month(start)
    parse_month(end)
    if end < start:
        raise MonthRangeError(start, end)
