"""
Record Builder Module

Turns the raw HR calendar batch into normalized AttendanceRecord entities
for one target month.
"""

from typing import Iterable, List, Set, Union

from .entities import RawCalendarEntry, AttendanceRecord
from .attendance_logic import calculate_work_hours, calculate_effective_workday


def normalize_entry(entry: RawCalendarEntry) -> AttendanceRecord:
    """
    Convert one raw calendar entry to a record without derived metrics.

    remark2 is the stringified first element of result_items, or None.
    """
    remark2 = str(entry.result_items[0]) if entry.result_items else None
    return AttendanceRecord(
        date=entry.date,
        month=(entry.date or "")[:7],
        is_rest=entry.is_rest,
        clock_in=entry.clock_in or None,
        clock_out=entry.clock_out or None,
        remark=entry.remark,
        remark2=remark2,
    )


def _to_record(entry: Union[RawCalendarEntry, dict]) -> AttendanceRecord:
    if isinstance(entry, dict):
        entry = RawCalendarEntry.from_api(entry)
    record = normalize_entry(entry)

    result = calculate_work_hours(record.clock_in, record.clock_out, record.is_rest)
    record.work_hours = result.work_hours
    record.missing_clock = result.missing_clock
    record.effective_workday = calculate_effective_workday(record)
    return record


def build_attendance_records(
    entries: Iterable[Union[RawCalendarEntry, dict]],
    target_month: str
) -> List[AttendanceRecord]:
    """
    Build the records of target_month from a raw calendar batch.

    Args:
        entries: RawCalendarEntry objects or raw calendarList dicts
        target_month: Month to keep (YYYY-MM)

    Returns:
        Records in input order, one per date (first occurrence wins)
    """
    records: List[AttendanceRecord] = []
    seen_dates: Set[str] = set()

    for entry in entries:
        record = _to_record(entry)
        if record.month != target_month:
            continue
        if record.date in seen_dates:
            continue
        seen_dates.add(record.date)
        records.append(record)

    return records
