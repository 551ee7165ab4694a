"""
Chart Series Module

Builds the monthly-average and daily chart points shown by the report views.
"""

from typing import Iterable, List, Optional

from .entities import AttendanceRecord, ChartPoint
from .summary import calculate_summary, round2, today_str


def build_monthly_average(
    records: Iterable[AttendanceRecord],
    months: Iterable[str],
    today: Optional[str] = None
) -> List[ChartPoint]:
    """
    One point per requested month, in the given order.

    Months without eligible records get a value of 0.
    """
    records = list(records)
    points = []
    for month in months:
        month_records = [record for record in records if record.month == month]
        summary = calculate_summary(month_records, today)
        value = summary.avg_hours if summary.avg_hours is not None else 0
        points.append(ChartPoint(label=month, value=value))
    return points


def build_daily_average(
    records: Iterable[AttendanceRecord],
    month: str,
    today: Optional[str] = None
) -> List[ChartPoint]:
    """
    Daily hours of a month, normalized to a full-day rate.

    Days with zero credit are left out entirely; half-day credit doubles
    the worked hours and marks the point as a half day.
    """
    cutoff = today_str(today)
    selected = sorted(
        (
            record for record in records
            if record.month == month
            and record.date < cutoff
            and record.effective_workday > 0
        ),
        key=lambda record: record.date
    )

    return [
        ChartPoint(
            label=record.date[8:10],
            value=round2(record.work_hours / record.effective_workday),
            date=record.date,
            is_half_day=record.effective_workday == 0.5,
        )
        for record in selected
    ]
