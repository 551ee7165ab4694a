"""
Report View Module

Containers for one rendered view: summary, colored chart bars and
record rows with their display status.
"""

from dataclasses import dataclass
from typing import List

from .entities import (
    AttendanceRecord, AttendanceSummary, ChartPoint, DayStatus, ThresholdResult
)
from .summary import format_hours


@dataclass
class ChartBar:
    """Chart point with its display color."""
    point: ChartPoint
    color: str  # 'green' when value >= threshold, else 'red'


@dataclass
class RecordRow:
    """Record with its display status."""
    record: AttendanceRecord
    status: DayStatus


@dataclass
class AttendanceView:
    """
    Everything a presentation layer needs to render one view.

    Attributes:
        chart_mode: "year" (monthly averages) or "month" (daily rates)
        months: Months covered, oldest first
        threshold: Resolved insufficient-hours threshold
        summary: Summary over the records of the covered months
        chart: Colored chart bars
        rows: Records of the covered months with their status
    """
    chart_mode: str
    months: List[str]
    threshold: ThresholdResult
    summary: AttendanceSummary
    chart: List[ChartBar]
    rows: List[RecordRow]

    @property
    def avg_text(self) -> str:
        if self.summary.avg_hours is None:
            return "異常"
        return format_hours(self.summary.avg_hours)

    @property
    def title_range(self) -> str:
        if not self.months:
            return ""
        if len(self.months) == 1:
            return self.months[0]
        return f"{self.months[0]} ~ {self.months[-1]}"

    def is_empty(self) -> bool:
        return not self.chart and not self.rows
