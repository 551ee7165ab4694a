"""
Domain Entities Module

Core domain entities using dataclasses for the work-hours tracker.
These entities represent the core business concepts independent of infrastructure.
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Union


# 考勤系統回傳的備註字串 (簡體，照 HR API 原樣比對)
REMARK_LATE = "迟到"
REMARK_EARLY_LEAVE = "早退"
REMARK_SICK_LEAVE = "病假"
REMARK_ANNUAL_LEAVE = "年假"
REMARK_COMP_LEAVE = "调休假"
HALF_DAY_MARKER = "半天"

INSUFFICIENT_HOURS_THRESHOLD = 10.5


@dataclass
class RawCalendarEntry:
    """
    One day of the HR calendar as returned by the attendance API.

    Attributes:
        date: Calendar date (YYYY-MM-DD)
        is_rest: Nonzero when the day is a rest day or holiday
        clock_in: First clock timestamp (YYYY-MM-DD HH:MM:SS) or None
        clock_out: Last clock timestamp or None
        remark: Exception label such as 迟到 / 病假
        result_items: Raw result list; the first item becomes remark2
    """
    date: str
    is_rest: int = 0
    clock_in: Optional[str] = None
    clock_out: Optional[str] = None
    remark: Optional[str] = None
    result_items: List[Union[str, int, float, None]] = field(default_factory=list)

    @classmethod
    def from_api(cls, item: dict) -> "RawCalendarEntry":
        """Build an entry from one element of ``data.calendarList``."""
        return cls(
            date=str(item.get("attDate") or ""),
            is_rest=int(item.get("isrest") or 0),
            clock_in=item.get("firstDate"),
            clock_out=item.get("endDate"),
            remark=item.get("exp"),
            result_items=list(item.get("resultList") or []),
        )


@dataclass
class AttendanceRecord:
    """
    Normalized attendance record for a single day.

    Attributes:
        date: The date of attendance (YYYY-MM-DD)
        month: Month the date belongs to (YYYY-MM)
        is_rest: Nonzero for rest days
        clock_in: Clock-in timestamp string (None if not recorded)
        clock_out: Clock-out timestamp string (None if not recorded)
        remark: Exception label from the HR system
        remark2: First item of the HR result list, stringified
        work_hours: Hours between clock-in and clock-out
        effective_workday: Credited workday fraction (0, 0.5 or 1)
        missing_clock: True when a working day lacks a usable timestamp
    """
    date: str
    month: str
    is_rest: int = 0
    clock_in: Optional[str] = None
    clock_out: Optional[str] = None
    remark: Optional[str] = None
    remark2: Optional[str] = None
    work_hours: float = 0.0
    effective_workday: float = 0.0
    missing_clock: bool = False

    def to_dict(self) -> dict:
        """Serialize using the camelCase keys of the cached JSON payload."""
        return {
            "date": self.date,
            "month": self.month,
            "isRest": self.is_rest,
            "clockIn": self.clock_in,
            "clockOut": self.clock_out,
            "remark": self.remark,
            "remark2": self.remark2,
            "workHours": self.work_hours,
            "effectiveWorkday": self.effective_workday,
            "missingClock": self.missing_clock,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AttendanceRecord":
        record_date = data.get("date", "")
        return cls(
            date=record_date,
            month=data.get("month") or record_date[:7],
            is_rest=data.get("isRest") or 0,
            clock_in=data.get("clockIn"),
            clock_out=data.get("clockOut"),
            remark=data.get("remark"),
            remark2=data.get("remark2"),
            work_hours=data.get("workHours", 0.0),
            effective_workday=data.get("effectiveWorkday", 0.0),
            missing_clock=data.get("missingClock", False),
        )


@dataclass
class WorkHoursResult:
    """Outcome of the work-hours calculation for one day."""
    work_hours: float
    missing_clock: bool


@dataclass
class AttendanceSummary:
    """
    Aggregated figures over the eligible (before today) records.

    Attributes:
        valid_days: Sum of effective workdays
        valid_hours: Sum of worked hours
        avg_hours: valid_hours / valid_days rounded to 2 decimals, None without valid days
    """
    valid_days: float = 0.0
    valid_hours: float = 0.0
    avg_hours: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "validDays": self.valid_days,
            "validHours": self.valid_hours,
            "avgHours": self.avg_hours,
        }


@dataclass
class ChartPoint:
    """A single bar of the monthly or daily chart."""
    label: str
    value: float
    date: Optional[str] = None
    is_half_day: Optional[bool] = None

    def to_dict(self) -> dict:
        data = {"label": self.label, "value": self.value}
        if self.date is not None:
            data["date"] = self.date
        if self.is_half_day is not None:
            data["isHalfDay"] = self.is_half_day
        return data


@dataclass
class ThresholdResult:
    """Resolved insufficiency threshold."""
    value: float
    normalized: str
    valid: bool


class DayStatus(Enum):
    """Display status of a single day."""
    NORMAL = auto()         # 正常
    REST = auto()           # 假期
    MISSING_CLOCK = auto()  # 缺卡
    INSUFFICIENT = auto()   # 工時不足
