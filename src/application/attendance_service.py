"""
Attendance Service Module

Application layer service that orchestrates fetching, caching and the
derived report views. Separates business logic from presentation concerns.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from domain.entities import AttendanceRecord
from domain.attendance_logic import determine_day_status
from domain.record_builder import build_attendance_records
from domain.report_view import AttendanceView, ChartBar, RecordRow
from domain.summary import calculate_summary, filter_records_by_months
from domain.chart_series import build_monthly_average, build_daily_average
from domain.threshold import parse_threshold
from domain.months import (
    current_month, get_months_between, get_recent_months, next_month,
    shift_month, validate_month_range
)
from infrastructure.attendance_api import AttendanceApiClient, AttendanceError
from infrastructure.record_cache import CachedRecords, RecordCache
from infrastructure.logger import get_logger

logger = get_logger("AttendanceService")

FETCHED_AT_FORMAT = "%Y-%m-%d %H:%M:%S"
CHART_MODES = ("year", "month")


@dataclass
class FetchResult:
    """Result of pulling recent months from the HR API."""
    success: bool
    records: List[AttendanceRecord] = field(default_factory=list)
    months: List[str] = field(default_factory=list)
    fetched_at: Optional[str] = None
    error_message: str = ""


@dataclass
class ViewParams:
    """
    Parameters of a report view.

    Unset months default to the last 12 months (year mode) and the
    current month (month mode).
    """
    chart_mode: str = "year"
    range_start: Optional[str] = None
    range_end: Optional[str] = None
    selected_month: Optional[str] = None
    threshold_text: str = "10.5"


class AttendanceService:
    """
    Application service for fetching attendance and building report views.

    This service:
    - Pulls each cycle plus its following month, since a cycle's days can
      be reported in the next month's calendar
    - Converts API failures into a FetchResult instead of raising
    - Depends only on domain functions and infrastructure adapters
    """

    def __init__(
        self,
        client: AttendanceApiClient,
        cache: Optional[RecordCache] = None,
        clock: Optional[Callable[[], datetime]] = None
    ):
        self._client = client
        self._cache = cache
        self._clock = clock or datetime.now

    def today(self) -> str:
        return self._clock().date().isoformat()

    def fetch_recent(self, lookback_months: int = 12) -> FetchResult:
        """Fetch the last ``lookback_months`` months including the current one."""
        months = get_recent_months(lookback_months, today=self._clock().date())
        return self.fetch_months(months)

    def fetch_months(self, months: List[str]) -> FetchResult:
        """
        Fetch and build records for the given cycles, in order.

        Returns:
            FetchResult; on failure success is False and error_message is set
        """
        if not months:
            logger.warning("未指定拉取月份，略過拉取")
            return FetchResult(success=False, error_message="未指定拉取月份")

        logger.info(f"開始拉取 {len(months)} 個月份的出勤資料")
        aggregated: List[AttendanceRecord] = []

        try:
            self._client.ensure_credentials()
            for cycle in months:
                current = self._client.get_calendar(cycle)
                following = self._client.get_calendar(next_month(cycle))
                aggregated.extend(build_attendance_records(current + following, cycle))
        except AttendanceError as e:
            logger.error(f"出勤資料拉取失敗: {e}")
            return FetchResult(success=False, months=list(months), error_message=str(e))

        fetched_at = self._clock().strftime(FETCHED_AT_FORMAT)
        logger.info(f"拉取完成: 共 {len(aggregated)} 筆紀錄")

        if self._cache is not None:
            try:
                self._cache.save(aggregated, self._client.em_code, fetched_at)
            except OSError as e:
                # Records are still usable without the cache
                logger.error(f"快取寫入失敗: {e}")

        return FetchResult(
            success=True,
            records=aggregated,
            months=list(months),
            fetched_at=fetched_at
        )

    def load_cached(self) -> Optional[CachedRecords]:
        """Cached records of the client's employee code, if any."""
        if self._cache is None:
            return None
        return self._cache.load(self._client.em_code)

    def build_view(
        self,
        records: List[AttendanceRecord],
        params: ViewParams
    ) -> AttendanceView:
        """
        Build the summary, chart and record rows of one view.

        Raises:
            ValueError: If chart_mode or a month is malformed
            MonthRangeError: If range_end precedes range_start
        """
        if params.chart_mode not in CHART_MODES:
            raise ValueError(f"Unknown chart mode: {params.chart_mode}")

        today = self.today()
        this_month = current_month(self._clock().date())
        threshold = parse_threshold(params.threshold_text)

        if params.chart_mode == "year":
            range_end = params.range_end or this_month
            range_start = params.range_start or shift_month(range_end, -11)
            validate_month_range(range_start, range_end)
            months = get_months_between(range_start, range_end)
            selected = filter_records_by_months(records, months)
            points = build_monthly_average(records, months, today)
        else:
            month = params.selected_month or this_month
            validate_month_range(month, month)
            months = [month]
            selected = [record for record in records if record.month == month]
            points = build_daily_average(records, month, today)

        chart = [
            ChartBar(
                point=point,
                color="green" if point.value >= threshold.value else "red"
            )
            for point in points
        ]
        rows = [
            RecordRow(record=record, status=determine_day_status(record, threshold.value))
            for record in selected
        ]

        return AttendanceView(
            chart_mode=params.chart_mode,
            months=months,
            threshold=threshold,
            summary=calculate_summary(selected, today),
            chart=chart,
            rows=rows
        )
