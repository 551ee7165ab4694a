"""
Excel Writer Module

Generates formatted Excel work-hour reports with styling.
Applies color formatting based on the day status and chart thresholds.
"""

from pathlib import Path
from typing import List, Optional

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment, Border, Side
from openpyxl.utils import get_column_letter

from domain.report_view import AttendanceView
from domain.entities import DayStatus
from domain.summary import round2
from infrastructure.logger import get_logger

logger = get_logger("ExcelWriter")


class ExcelWriter:
    """
    Generates formatted Excel work-hour reports.

    Output format:
    - Sheet "出勤明細": one row per record with clock times, hours and flags
    - Sheet "圖表資料": the chart points (monthly averages or daily rates)
    - Sheet "統計": summary figures and the threshold in use

    Styling:
    - Red background for missing clocks, orange for insufficient hours
    - Gray rows for rest days
    - Green/Red chart values against the threshold
    """

    COLORS = {
        'green': PatternFill(start_color='90EE90', end_color='90EE90', fill_type='solid'),
        'red': PatternFill(start_color='FF6B6B', end_color='FF6B6B', fill_type='solid'),
        'orange': PatternFill(start_color='FFA500', end_color='FFA500', fill_type='solid'),
        'gray': PatternFill(start_color='D3D3D3', end_color='D3D3D3', fill_type='solid'),
        'header': PatternFill(start_color='4472C4', end_color='4472C4', fill_type='solid'),
    }

    STATUS_COLORS = {
        DayStatus.MISSING_CLOCK: 'red',
        DayStatus.INSUFFICIENT: 'orange',
        DayStatus.REST: 'gray',
    }

    STATUS_LABELS = {
        DayStatus.NORMAL: "",
        DayStatus.REST: "假期",
        DayStatus.MISSING_CLOCK: "缺卡",
        DayStatus.INSUFFICIENT: "工時不足",
    }

    RECORD_HEADERS = ["日期", "上班", "下班", "工時", "有效工作日", "備註", "備註2", "狀態"]
    RECORD_WIDTHS = [12, 20, 20, 8, 10, 12, 16, 10]

    BORDER = Border(
        left=Side(style='thin'),
        right=Side(style='thin'),
        top=Side(style='thin'),
        bottom=Side(style='thin')
    )

    def __init__(self):
        self.wb: Optional[Workbook] = None

    def create_report(self, view: AttendanceView, output_path: Path) -> Path:
        """
        Create a complete work-hour report.

        Args:
            view: The view built by AttendanceService.build_view
            output_path: Path to save the Excel file

        Returns:
            Path to the created file
        """
        self.wb = Workbook()

        # Remove default sheet
        self.wb.remove(self.wb.active)

        self._write_records_sheet(self.wb.create_sheet("出勤明細"), view)
        self._write_chart_sheet(self.wb.create_sheet("圖表資料"), view)
        self._write_summary_sheet(self.wb.create_sheet("統計"), view)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        self.wb.save(output_path)
        logger.info(f"Excel 報表已儲存: {output_path}")
        return output_path

    def _write_header(self, ws, headers: List[str], widths: List[int]) -> None:
        for col, (title, width) in enumerate(zip(headers, widths), start=1):
            cell = ws.cell(1, col, title)
            cell.font = Font(bold=True, color='FFFFFF')
            cell.fill = self.COLORS['header']
            cell.alignment = Alignment(horizontal='center', vertical='center')
            cell.border = self.BORDER
            ws.column_dimensions[get_column_letter(col)].width = width
        ws.freeze_panes = "A2"

    def _write_records_sheet(self, ws, view: AttendanceView) -> None:
        """Write one row per record, colored by day status."""
        self._write_header(ws, self.RECORD_HEADERS, self.RECORD_WIDTHS)

        for row_idx, row in enumerate(view.rows, start=2):
            record = row.record
            values = [
                record.date,
                record.clock_in or "--",
                record.clock_out or "--",
                round2(record.work_hours),
                record.effective_workday,
                record.remark or "--",
                record.remark2 or "--",
                self.STATUS_LABELS[row.status],
            ]
            fill = self.COLORS.get(self.STATUS_COLORS.get(row.status, ''))

            for col, value in enumerate(values, start=1):
                cell = ws.cell(row_idx, col, value)
                cell.border = self.BORDER
                cell.alignment = Alignment(horizontal='center')
                if fill is not None:
                    cell.fill = fill

            ws.cell(row_idx, 4).number_format = '0.00'

    def _write_chart_sheet(self, ws, view: AttendanceView) -> None:
        """Write chart points with green/red values against the threshold."""
        label_title = "月份" if view.chart_mode == "year" else "日"
        self._write_header(ws, [label_title, "平均工時", "半天"], [12, 12, 8])

        for row_idx, bar in enumerate(view.chart, start=2):
            point = bar.point
            ws.cell(row_idx, 1, point.label).border = self.BORDER

            value_cell = ws.cell(row_idx, 2, point.value)
            value_cell.number_format = '0.00'
            value_cell.fill = self.COLORS[bar.color]
            value_cell.border = self.BORDER

            half_day_cell = ws.cell(row_idx, 3, "是" if point.is_half_day else "")
            half_day_cell.border = self.BORDER
            half_day_cell.alignment = Alignment(horizontal='center')

    def _write_summary_sheet(self, ws, view: AttendanceView) -> None:
        """Write summary figures as label/value pairs."""
        self._write_header(ws, ["項目", "數值"], [16, 16])

        summary = view.summary
        items = [
            ("期間", view.title_range),
            ("有效工作日", summary.valid_days),
            ("有效工時", round2(summary.valid_hours)),
            ("平均工時", view.avg_text),
            ("工時門檻", view.threshold.value),
        ]
        for row_idx, (label, value) in enumerate(items, start=2):
            ws.cell(row_idx, 1, label).font = Font(bold=True)
            ws.cell(row_idx, 1).border = self.BORDER
            ws.cell(row_idx, 2, value).border = self.BORDER
