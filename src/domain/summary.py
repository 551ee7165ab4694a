"""
Summary Module

Aggregates attendance records into valid days, valid hours and the
average hours per effective workday.
"""

import math
from datetime import date
from typing import Iterable, List, Optional

from .entities import AttendanceRecord, AttendanceSummary


def round2(value: float) -> float:
    """Round to 2 decimals with halves rounded up (multiply, round, divide)."""
    return math.floor(value * 100 + 0.5) / 100


def format_hours(value: float) -> str:
    """Format hours with exactly two decimals."""
    return f"{round2(value):.2f}"


def today_str(today: Optional[str] = None) -> str:
    """Return the given day or the local calendar date as YYYY-MM-DD."""
    return today or date.today().isoformat()


def eligible_records(
    records: Iterable[AttendanceRecord],
    today: Optional[str] = None
) -> List[AttendanceRecord]:
    """Records strictly before today; today's data is still incomplete."""
    cutoff = today_str(today)
    return [record for record in records if record.date < cutoff]


def calculate_summary(
    records: Iterable[AttendanceRecord],
    today: Optional[str] = None
) -> AttendanceSummary:
    """
    Calculate the attendance summary of a record set.

    Args:
        records: Attendance records (any months)
        today: Override of the current date (YYYY-MM-DD), mainly for tests

    Returns:
        AttendanceSummary; avg_hours is None when there are no valid days
    """
    eligible = eligible_records(records, today)
    valid_days = sum(record.effective_workday for record in eligible)
    valid_hours = sum(record.work_hours for record in eligible)
    avg_hours = round2(valid_hours / valid_days) if valid_days > 0 else None

    return AttendanceSummary(
        valid_days=valid_days,
        valid_hours=valid_hours,
        avg_hours=avg_hours
    )


def filter_records_by_months(
    records: Iterable[AttendanceRecord],
    months: Iterable[str]
) -> List[AttendanceRecord]:
    """Keep the records whose month is one of the given months."""
    wanted = set(months)
    return [record for record in records if record.month in wanted]
