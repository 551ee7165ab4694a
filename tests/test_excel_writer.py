"""
Unit tests for the Excel work-hours report.
"""

import pytest
import tempfile
from datetime import datetime
from pathlib import Path

from openpyxl import load_workbook

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from application.attendance_service import AttendanceService, ViewParams
from domain.entities import AttendanceRecord
from infrastructure.excel_writer import ExcelWriter


def build_view(records, **params):
    service = AttendanceService(client=None, clock=lambda: datetime(2026, 2, 10, 12, 0, 0))
    return service.build_view(records, ViewParams(**params))


RECORDS = [
    AttendanceRecord(
        date="2026-01-05", month="2026-01",
        clock_in="2026-01-05 09:00:00", clock_out="2026-01-05 21:00:00",
        work_hours=12, effective_workday=1
    ),
    AttendanceRecord(
        date="2026-01-06", month="2026-01",
        clock_in="2026-01-06 09:00:00", clock_out="2026-01-06 18:00:00",
        remark="迟到", work_hours=9, effective_workday=1
    ),
    AttendanceRecord(date="2026-01-07", month="2026-01", missing_clock=True),
    AttendanceRecord(date="2026-01-10", month="2026-01", is_rest=1),
    AttendanceRecord(
        date="2026-01-12", month="2026-01", remark2="半天", work_hours=6, effective_workday=0.5
    ),
]


def fill_rgb(cell) -> str:
    return cell.fill.start_color.rgb


class TestExcelWriter:
    """Tests for ExcelWriter.create_report."""

    @pytest.fixture
    def workbook(self):
        view = build_view(RECORDS, chart_mode="month", selected_month="2026-01")
        with tempfile.TemporaryDirectory() as tmpdir:
            output_path = Path(tmpdir) / "out" / "report.xlsx"
            result = ExcelWriter().create_report(view, output_path)
            assert result == output_path
            assert output_path.exists()
            yield load_workbook(output_path)

    def test_sheet_names(self, workbook):
        assert workbook.sheetnames == ["出勤明細", "圖表資料", "統計"]

    def test_record_rows(self, workbook):
        ws = workbook["出勤明細"]
        assert [c.value for c in ws[1]] == [
            "日期", "上班", "下班", "工時", "有效工作日", "備註", "備註2", "狀態"
        ]
        assert ws.max_row == 1 + len(RECORDS)
        assert ws.cell(2, 1).value == "2026-01-05"
        assert ws.cell(3, 6).value == "迟到"
        assert ws.cell(4, 2).value == "--"

    def test_status_colors(self, workbook):
        ws = workbook["出勤明細"]
        assert not ws.cell(2, 8).value
        assert ws.cell(3, 8).value == "工時不足"
        assert fill_rgb(ws.cell(3, 1)).endswith("FFA500")
        assert ws.cell(4, 8).value == "缺卡"
        assert fill_rgb(ws.cell(4, 1)).endswith("FF6B6B")
        assert ws.cell(5, 8).value == "假期"
        assert fill_rgb(ws.cell(5, 1)).endswith("D3D3D3")

    def test_chart_sheet(self, workbook):
        ws = workbook["圖表資料"]
        assert ws.cell(1, 1).value == "日"
        labels = [ws.cell(row, 1).value for row in range(2, ws.max_row + 1)]
        assert labels == ["05", "06", "12"]
        assert fill_rgb(ws.cell(2, 2)).endswith("90EE90")
        assert fill_rgb(ws.cell(3, 2)).endswith("FF6B6B")
        assert ws.cell(4, 2).value == 12
        assert ws.cell(4, 3).value == "是"

    def test_summary_sheet(self, workbook):
        ws = workbook["統計"]
        items = {ws.cell(row, 1).value: ws.cell(row, 2).value for row in range(2, ws.max_row + 1)}
        assert items["期間"] == "2026-01"
        assert items["有效工作日"] == 2.5
        assert items["有效工時"] == 27
        assert items["平均工時"] == "10.80"
        assert items["工時門檻"] == 10.5

    def test_year_chart_label(self):
        view = build_view(RECORDS, chart_mode="year", range_start="2025-12", range_end="2026-01")
        with tempfile.TemporaryDirectory() as tmpdir:
            output_path = Path(tmpdir) / "year.xlsx"
            ExcelWriter().create_report(view, output_path)
            ws = load_workbook(output_path)["圖表資料"]
            assert ws.cell(1, 1).value == "月份"
            assert [ws.cell(2, 1).value, ws.cell(3, 1).value] == ["2025-12", "2026-01"]
            assert ws.cell(2, 2).value == 0


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
