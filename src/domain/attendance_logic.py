"""
Attendance Logic Module

Per-day rules: worked hours from the clock timestamps, effective workday
credit from the remark table, and the insufficient-hours flag.
"""

from datetime import datetime
from typing import Callable, List, Optional, Tuple

from .entities import (
    AttendanceRecord, DayStatus, WorkHoursResult, INSUFFICIENT_HOURS_THRESHOLD,
    REMARK_LATE, REMARK_EARLY_LEAVE, REMARK_SICK_LEAVE,
    REMARK_ANNUAL_LEAVE, REMARK_COMP_LEAVE, HALF_DAY_MARKER
)


DATETIME_FORMATS = [
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
    '%Y-%m-%dT%H:%M:%S',
    '%Y/%m/%d %H:%M:%S',
    '%Y-%m-%d',
]

ATTENDANCE_EXCEPTIONS = {REMARK_LATE, REMARK_EARLY_LEAVE}
LEAVE_REMARKS = {REMARK_SICK_LEAVE, REMARK_ANNUAL_LEAVE, REMARK_COMP_LEAVE}


def parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a clock timestamp, returning None when it is blank or malformed."""
    if not value:
        return None
    str_val = str(value).strip()
    for fmt in DATETIME_FORMATS:
        try:
            return datetime.strptime(str_val, fmt)
        except ValueError:
            continue
    return None


def calculate_work_hours(
    clock_in: Optional[str],
    clock_out: Optional[str],
    is_rest: int
) -> WorkHoursResult:
    """
    Calculate hours worked between clock-in and clock-out.

    Rest days never count as missing a clock. The difference is not clamped,
    so a clock-out before the clock-in yields negative hours.

    Args:
        clock_in: Clock-in timestamp string
        clock_out: Clock-out timestamp string
        is_rest: Nonzero for rest days

    Returns:
        WorkHoursResult with hours and the missing-clock flag
    """
    if is_rest != 0:
        return WorkHoursResult(work_hours=0, missing_clock=False)

    start = parse_datetime(clock_in)
    end = parse_datetime(clock_out)
    if start is None or end is None:
        return WorkHoursResult(work_hours=0, missing_clock=True)

    diff_hours = (end - start).total_seconds() / 3600
    return WorkHoursResult(work_hours=diff_hours, missing_clock=False)


def _is_rest(record) -> bool:
    return record.is_rest != 0


def _is_full_credit_remark(record) -> bool:
    return not record.remark or record.remark in ATTENDANCE_EXCEPTIONS


def _is_leave(record) -> bool:
    return record.remark in LEAVE_REMARKS


def _leave_credit(record) -> float:
    # 請假當天只有實際有工時才算半天
    return 0.5 if record.work_hours > 0 else 0


def _is_half_day(record) -> bool:
    return bool(record.remark2) and HALF_DAY_MARKER in record.remark2


# Evaluated in order, first match wins
EFFECTIVE_WORKDAY_RULES: List[Tuple[Callable, Callable]] = [
    (_is_rest, lambda record: 0),
    (_is_full_credit_remark, lambda record: 1),
    (_is_leave, _leave_credit),
    (_is_half_day, lambda record: 0.5),
]


def calculate_effective_workday(record) -> float:
    """
    Determine the effective workday credit (0, 0.5 or 1) of a record.

    Accepts any object exposing is_rest, remark, remark2 and work_hours.
    """
    for matches, credit in EFFECTIVE_WORKDAY_RULES:
        if matches(record):
            return credit(record)
    return 0


def is_insufficient_hours(
    record: AttendanceRecord,
    threshold: float = INSUFFICIENT_HOURS_THRESHOLD
) -> bool:
    """Check whether a worked day stays at or below the hour threshold."""
    if record.is_rest != 0 or record.missing_clock:
        return False
    return record.work_hours <= threshold


def determine_day_status(
    record: AttendanceRecord,
    threshold: float = INSUFFICIENT_HOURS_THRESHOLD
) -> DayStatus:
    """Display status of a day; a missing clock outranks short hours."""
    if record.is_rest != 0:
        return DayStatus.REST
    if record.missing_clock:
        return DayStatus.MISSING_CLOCK
    if is_insufficient_hours(record, threshold):
        return DayStatus.INSUFFICIENT
    return DayStatus.NORMAL
