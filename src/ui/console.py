"""
Console Module

Command-line front end: fetch recent months, print summaries and charts,
export Excel/PDF reports and edit the persisted settings.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from config.config_manager import ConfigManager, AppConfig
from application.attendance_service import AttendanceService, ViewParams
from domain.entities import DayStatus
from domain.months import MonthRangeError
from domain.report_view import AttendanceView
from domain.summary import format_hours
from domain.threshold import parse_threshold
from infrastructure.attendance_api import AttendanceApiClient
from infrastructure.record_cache import RecordCache
from infrastructure.logger import get_logger, set_console_level

logger = get_logger("Console")

STATUS_MARKS = {
    DayStatus.NORMAL: "",
    DayStatus.REST: "假期",
    DayStatus.MISSING_CLOCK: "缺卡",
    DayStatus.INSUFFICIENT: "工時不足",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="teams-hours",
        description="Teams 工時統計：拉取出勤資料並計算有效工時"
    )
    parser.add_argument("--config", type=Path, default=None,
                        help="設定檔路徑 (預設為 src/config.json)")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="在終端輸出除錯日誌")
    sub = parser.add_subparsers(dest="command", required=True)

    fetch = sub.add_parser("fetch", help="拉取近幾個月的出勤資料並寫入快取")
    fetch.add_argument("--months", type=int, default=None,
                       help="拉取月數 (預設使用設定值)")

    for name, help_text in (("summary", "顯示統計、圖表資料與每日明細"),
                            ("export", "輸出 Excel / PDF 報表")):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("--mode", choices=["year", "month"], default=None)
        cmd.add_argument("--start", help="起始年月 YYYY-MM (year 模式)")
        cmd.add_argument("--end", help="結束年月 YYYY-MM (year 模式)")
        cmd.add_argument("--month", help="月份 YYYY-MM (month 模式)")
        cmd.add_argument("--threshold", help="工時門檻 (預設使用設定值)")
        if name == "export":
            cmd.add_argument("--output-dir", type=Path, default=None)
            cmd.add_argument("--no-pdf", action="store_true", help="不輸出 PDF")

    cfg = sub.add_parser("config", help="更新並顯示設定")
    cfg.add_argument("--em-code")
    cfg.add_argument("--authorization")
    cfg.add_argument("--threshold")
    cfg.add_argument("--lookback", type=int)
    cfg.add_argument("--chart-mode", choices=["year", "month"])

    return parser


def create_service(manager: ConfigManager) -> AttendanceService:
    """Wire the API client and record cache from configuration."""
    client = AttendanceApiClient.from_config(manager.config)
    cache = RecordCache(manager.cache_path)
    return AttendanceService(client, cache=cache)


def _view_params(args, config: AppConfig) -> ViewParams:
    return ViewParams(
        chart_mode=args.mode or config.ui_prefs.chart_mode,
        range_start=args.start,
        range_end=args.end,
        selected_month=args.month,
        threshold_text=args.threshold if args.threshold is not None else config.ui_prefs.threshold
    )


def _load_view(args, manager: ConfigManager) -> Optional[AttendanceView]:
    service = create_service(manager)
    cached = service.load_cached()
    if cached is None:
        print("尚無快取資料，請先執行 fetch。", file=sys.stderr)
        return None

    try:
        view = service.build_view(cached.records, _view_params(args, manager.config))
    except MonthRangeError as e:
        print(e.message, file=sys.stderr)
        return None
    except ValueError as e:
        print(f"參數錯誤: {e}", file=sys.stderr)
        return None

    print(f"當前使用資料拉取時間為 {cached.fetched_at or '--'}")
    return view


def print_view(view: AttendanceView, out=sys.stdout) -> None:
    """Print summary, chart table and record rows."""
    if not view.threshold.valid:
        print(f"工時門檻無效，改用 {view.threshold.normalized}", file=out)

    print(f"期間: {view.title_range}", file=out)
    print(f"平均工時: {view.avg_text}    有效工作日: {view.summary.valid_days:g}", file=out)
    print("", file=out)

    print("年" if view.chart_mode == "year" else "月", file=out)
    if not view.chart:
        print("  暫無數據", file=out)
    for bar in view.chart:
        mark = "+" if bar.color == "green" else "-"
        half = " 半天有效工時" if bar.point.is_half_day else ""
        print(f"  {bar.point.label:>7} {format_hours(bar.point.value):>6} {mark}{half}", file=out)
    print("", file=out)

    for row in view.rows:
        record = row.record
        print(
            f"{record.date}  {format_hours(record.work_hours):>6}  "
            f"上班: {record.clock_in or '--'}  下班: {record.clock_out or '--'}  "
            f"備註: {record.remark or '--'}  備註2: {record.remark2 or '--'}  "
            f"{STATUS_MARKS[row.status]}",
            file=out
        )


def _cmd_fetch(args, manager: ConfigManager) -> int:
    months = args.months if args.months is not None else manager.config.fetch.lookback_months
    if not 1 <= months <= 12:
        print("拉取月數需介於 1 到 12", file=sys.stderr)
        return 1
    service = create_service(manager)
    result = service.fetch_recent(months)
    if not result.success:
        print(result.error_message, file=sys.stderr)
        return 1
    print(f"已拉取 {len(result.records)} 筆紀錄 ({result.months[0]} ~ {result.months[-1]})，"
          f"拉取時間 {result.fetched_at}")
    return 0


def _cmd_summary(args, manager: ConfigManager) -> int:
    view = _load_view(args, manager)
    if view is None:
        return 1
    print_view(view)
    return 0


def _cmd_export(args, manager: ConfigManager) -> int:
    from infrastructure.excel_writer import ExcelWriter
    from infrastructure.pdf_writer import PdfWriter, format_filename

    view = _load_view(args, manager)
    if view is None:
        return 1

    settings = manager.config.output_settings
    output_dir = args.output_dir or Path(settings.output_dir or ".")
    start, end = view.months[0], view.months[-1]

    excel_path = output_dir / format_filename(settings.excel_filename_pattern, start, end)
    ExcelWriter().create_report(view, excel_path)
    print(f"Excel: {excel_path}")

    if settings.generate_pdf and not args.no_pdf:
        pdf_path = output_dir / format_filename(settings.pdf_filename_pattern, start, end)
        try:
            PdfWriter(custom_font_path=settings.custom_font_path or None).create_report(
                view, pdf_path
            )
            print(f"PDF: {pdf_path}")
        except Exception as e:
            # The Excel report is already written
            logger.error(f"PDF 生成失敗: {e}")
            print(f"PDF 生成失敗: {e}", file=sys.stderr)
            return 1
    return 0


def _cmd_config(args, manager: ConfigManager) -> int:
    config = manager.config
    if args.em_code is not None or args.authorization is not None:
        manager.update(
            "credentials",
            em_code=(args.em_code if args.em_code is not None else config.credentials.em_code).strip(),
            authorization=(
                args.authorization if args.authorization is not None
                else config.credentials.authorization
            ).strip()
        )
    if args.threshold is not None:
        result = parse_threshold(args.threshold, config.ui_prefs.threshold)
        if not result.valid:
            print(f"工時門檻無效，保留 {result.normalized}", file=sys.stderr)
        manager.update("ui_prefs", threshold=result.normalized)
    if args.chart_mode is not None:
        manager.update("ui_prefs", chart_mode=args.chart_mode)
    if args.lookback is not None:
        if not 1 <= args.lookback <= 12:
            print("拉取月數需介於 1 到 12", file=sys.stderr)
            return 1
        manager.update("fetch", lookback_months=args.lookback)

    token = config.credentials.authorization
    masked = f"{token[:4]}****" if token else "--"
    print(f"當前工號：{config.credentials.em_code or '--'}")
    print(f"Authorization：{masked}")
    print(f"工時門檻：{config.ui_prefs.threshold}")
    print(f"圖表模式：{config.ui_prefs.chart_mode}")
    print(f"拉取月數：{config.fetch.lookback_months}")
    return 0


COMMANDS = {
    "fetch": _cmd_fetch,
    "summary": _cmd_summary,
    "export": _cmd_export,
    "config": _cmd_config,
}


def run_app(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, load configuration and dispatch the command."""
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_console_level(logging.DEBUG)
    manager = ConfigManager(args.config)
    manager.load()
    return COMMANDS[args.command](args, manager)


def main() -> None:
    sys.exit(run_app())
