"""
PDF Writer Module

Generates work-hour PDF reports using fpdf2.
Draws the summary, a bar chart against the threshold and the record table.
"""

import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from fpdf import FPDF

from domain.entities import DayStatus
from domain.report_view import AttendanceView
from domain.summary import format_hours
from infrastructure.logger import get_logger

logger = get_logger("PdfWriter")


# ==============================================================================
# Font Configuration
# ==============================================================================
WINDOWS_FONT_PATHS: List[Path] = [
    Path("C:/Windows/Fonts/msyh.ttc"),       # 微軟雅黑 (Microsoft YaHei)
    Path("C:/Windows/Fonts/msjh.ttc"),       # 微軟正黑體 (Microsoft JhengHei)
    Path("C:/Windows/Fonts/simsun.ttc"),     # 宋體 (SimSun)
]

MACOS_FONT_PATHS: List[Path] = [
    Path("/System/Library/Fonts/PingFang.ttc"),
    Path("/System/Library/Fonts/STHeiti Light.ttc"),
    Path("/Library/Fonts/Arial Unicode.ttf"),
]

LINUX_FONT_PATHS: List[Path] = [
    Path("/usr/share/fonts/truetype/noto/NotoSansCJK-Regular.ttc"),
    Path("/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc"),
    Path("/usr/share/fonts/truetype/wqy/wqy-microhei.ttc"),
    Path("/usr/share/fonts/truetype/droid/DroidSansFallback.ttf"),
]

FALLBACK_FONT = "Helvetica"


def find_chinese_font(custom_font_path: Optional[str] = None) -> Optional[Path]:
    """
    Search for an available Chinese font with cross-platform support.
    """
    if custom_font_path:
        custom_path = Path(custom_font_path)
        if custom_path.exists():
            logger.info(f"使用自訂字型: {custom_path}")
            return custom_path
        logger.warning(f"自訂字型路徑不存在: {custom_path}")

    for font_path in _get_platform_fonts():
        if font_path.exists():
            logger.debug(f"找到系統字型: {font_path}")
            return font_path

    return None


def _get_platform_fonts() -> List[Path]:
    """Get the font search list for the current platform."""
    if sys.platform == 'win32':
        return WINDOWS_FONT_PATHS
    elif sys.platform == 'darwin':
        return MACOS_FONT_PATHS
    else:
        return LINUX_FONT_PATHS


# ==============================================================================
# WorkHoursPdf Class (A4 Portrait)
# ==============================================================================
class WorkHoursPdf(FPDF):
    """
    Custom FPDF class with Chinese font support for A4 work-hour reports.

    Without a CJK font the report falls back to Helvetica with English
    labels, and non Latin-1 data is replaced by '?'.
    """

    _font_family: str = FALLBACK_FONT
    _font_loaded: bool = False

    def __init__(self, title: str = "", custom_font_path: Optional[str] = None):
        super().__init__(orientation='P', unit='mm', format='A4')
        self.title_text = title
        self._setup_chinese_font(custom_font_path)

    def _setup_chinese_font(self, custom_font_path: Optional[str] = None) -> None:
        """Load Chinese font if available."""
        font_path = find_chinese_font(custom_font_path)

        if font_path:
            try:
                self.add_font("ChineseFont", "", str(font_path))
                self._font_family = "ChineseFont"
                self._font_loaded = True
                logger.info(f"成功載入中文字型: {font_path.name}")
            except Exception as e:
                logger.warning(f"無法載入中文字型 {font_path}: {e}")
                self._font_family = FALLBACK_FONT
                self._font_loaded = False
        else:
            logger.warning("無法找到中文字型，PDF 將改用英文標籤。")
            self._font_family = FALLBACK_FONT
            self._font_loaded = False

    @property
    def font_family_name(self) -> str:
        return self._font_family

    @property
    def supports_chinese(self) -> bool:
        return self._font_loaded

    def safe_text(self, text: str) -> str:
        """Make text printable with the active font."""
        if self._font_loaded:
            return text
        return text.encode('latin-1', errors='replace').decode('latin-1')

    def header(self) -> None:
        """Draw page header with centered title."""
        self.set_font(self._font_family, '', 14)
        self.cell(0, 10, self.safe_text(self.title_text), align='C',
                  new_x='LMARGIN', new_y='NEXT')
        self.ln(2)

    def footer(self) -> None:
        """Draw page footer with page number."""
        self.set_y(-12)
        self.set_font(self._font_family, '', 8)
        self.cell(0, 10, f'{self.page_no()}/{{nb}}', align='C')


# ==============================================================================
# PdfWriter Class
# ==============================================================================
class PdfWriter:
    """
    Generates PDF work-hour reports.

    Features:
    - Summary line (average hours, valid days, threshold)
    - Bar chart with a dashed threshold line and half-day markers
    - Record table colored by day status
    """

    # RGB Color definitions (matching ExcelWriter)
    COLORS: Dict[str, Tuple[int, int, int]] = {
        'green': (144, 238, 144),
        'red': (255, 107, 107),
        'orange': (255, 165, 0),
        'gray': (211, 211, 211),
        'header': (68, 114, 196),
        'white': (255, 255, 255),
        'label': (142, 142, 147),
        'warning': (255, 149, 0),
    }

    STATUS_COLORS = {
        DayStatus.MISSING_CLOCK: 'red',
        DayStatus.INSUFFICIENT: 'orange',
        DayStatus.REST: 'gray',
    }

    LABELS = {
        'zh': {
            'title': "工時統計",
            'avg': "平均工時",
            'days': "有效工作日",
            'threshold': "門檻",
            'half_day': "* 半天有效工時",
            'columns': ["日期", "上班", "下班", "工時", "有效", "備註", "備註2"],
        },
        'en': {
            'title': "Work Hours",
            'avg': "Avg hours",
            'days': "Valid days",
            'threshold': "Threshold",
            'half_day': "* Half-day rate",
            'columns': ["Date", "Clock in", "Clock out", "Hours", "Eff.", "Remark", "Remark 2"],
        },
    }

    # Layout constants (mm) for A4 Portrait (210mm width)
    MARGIN = 10
    CHART_HEIGHT = 60
    CHART_PADDING_BOTTOM = 8
    BAR_GAP = 2
    MAX_BAR_WIDTH = 10
    COLUMN_WIDTHS = [22, 36, 36, 16, 14, 24, 42]
    ROW_HEIGHT = 6

    def __init__(self, custom_font_path: Optional[str] = None):
        self._custom_font_path = custom_font_path

    def create_report(self, view: AttendanceView, output_path: Path) -> None:
        """
        Create the PDF report of one view.

        Empty views return early without writing a file.
        """
        if view.is_empty():
            return

        pdf = WorkHoursPdf(custom_font_path=self._custom_font_path)
        labels = self.LABELS['zh' if pdf.supports_chinese else 'en']
        pdf.title_text = f"{view.title_range} {labels['title']}"
        pdf.alias_nb_pages()
        pdf.set_margins(self.MARGIN, self.MARGIN, self.MARGIN)
        pdf.set_auto_page_break(auto=True, margin=15)
        pdf.add_page()

        self._draw_summary(pdf, view, labels)
        if view.chart:
            self._draw_chart(pdf, view, labels)
        if view.rows:
            self._draw_table(pdf, view, labels)

        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        pdf.output(str(output_path))
        logger.info(f"PDF 報表已儲存: {output_path}")

    @staticmethod
    def axis_label(view: AttendanceView, point) -> str:
        """X-axis text of a bar; year charts show months as YY-MM."""
        if view.chart_mode == "year":
            return point.label[2:]
        return point.label

    def _draw_summary(self, pdf: WorkHoursPdf, view: AttendanceView, labels: dict) -> None:
        pdf.set_font(pdf.font_family_name, '', 10)
        line = (
            f"{labels['avg']}: {view.avg_text}    "
            f"{labels['days']}: {view.summary.valid_days:g}    "
            f"{labels['threshold']}: {view.threshold.value:g}"
        )
        pdf.cell(0, 8, pdf.safe_text(line), new_x='LMARGIN', new_y='NEXT')
        pdf.ln(2)

    def _draw_chart(self, pdf: WorkHoursPdf, view: AttendanceView, labels: dict) -> None:
        """Draw one bar per chart point scaled to max(threshold, values, 1)."""
        bars = view.chart
        threshold = view.threshold.value
        max_value = max([threshold, 1] + [bar.point.value for bar in bars])

        left = self.MARGIN
        width = pdf.w - 2 * self.MARGIN
        top = pdf.get_y()
        plot_height = self.CHART_HEIGHT - self.CHART_PADDING_BOTTOM
        baseline = top + plot_height

        slot = width / len(bars)
        bar_width = min(self.MAX_BAR_WIDTH, slot - self.BAR_GAP)
        label_every = 1 if len(bars) <= 12 else -(-len(bars) // 6)

        pdf.set_font(pdf.font_family_name, '', 7)
        for index, bar in enumerate(bars):
            value = max(bar.point.value, 0)
            bar_height = value / max_value * plot_height
            x = left + index * slot + (slot - bar_width) / 2
            y = baseline - bar_height

            pdf.set_fill_color(*self.COLORS[bar.color])
            pdf.rect(x, y, bar_width, bar_height, style='F')

            if index % label_every == 0 or index == len(bars) - 1:
                pdf.set_text_color(*self.COLORS['label'])
                pdf.text(x, baseline + 5, pdf.safe_text(self.axis_label(view, bar.point)))

            if bar.point.is_half_day:
                pdf.set_text_color(*self.COLORS['warning'])
                pdf.text(x, max(y - 1, top + 3), "*")

        pdf.set_text_color(0, 0, 0)

        # Threshold line
        threshold_y = baseline - threshold / max_value * plot_height
        pdf.set_draw_color(*self.COLORS['label'])
        pdf.set_dash_pattern(dash=1.5, gap=1.5)
        pdf.line(left, threshold_y, left + width, threshold_y)
        pdf.set_dash_pattern()
        pdf.set_draw_color(0, 0, 0)

        pdf.set_y(top + self.CHART_HEIGHT)
        if any(bar.point.is_half_day for bar in bars):
            pdf.set_font(pdf.font_family_name, '', 7)
            pdf.set_text_color(*self.COLORS['warning'])
            pdf.cell(0, 4, pdf.safe_text(labels['half_day']), new_x='LMARGIN', new_y='NEXT')
            pdf.set_text_color(0, 0, 0)
        pdf.ln(4)

    def _draw_table(self, pdf: WorkHoursPdf, view: AttendanceView, labels: dict) -> None:
        """Draw the record table, one row per day."""
        pdf.set_font(pdf.font_family_name, '', 8)
        pdf.set_fill_color(*self.COLORS['header'])
        pdf.set_text_color(*self.COLORS['white'])
        for title, col_width in zip(labels['columns'], self.COLUMN_WIDTHS):
            pdf.cell(col_width, self.ROW_HEIGHT, pdf.safe_text(title),
                     border=1, align='C', fill=True)
        pdf.ln(self.ROW_HEIGHT)
        pdf.set_text_color(0, 0, 0)

        for row in view.rows:
            record = row.record
            values = [
                record.date,
                record.clock_in or "--",
                record.clock_out or "--",
                format_hours(record.work_hours),
                f"{record.effective_workday:g}",
                record.remark or "--",
                record.remark2 or "--",
            ]
            color_name = self.STATUS_COLORS.get(row.status)
            fill = color_name is not None
            if fill:
                pdf.set_fill_color(*self.COLORS[color_name])

            for value, col_width in zip(values, self.COLUMN_WIDTHS):
                pdf.cell(col_width, self.ROW_HEIGHT, pdf.safe_text(str(value)),
                         border=1, align='C', fill=fill)
            pdf.ln(self.ROW_HEIGHT)


# ==============================================================================
# Utility Functions
# ==============================================================================
def format_filename(pattern: str, start: str, end: str) -> str:
    """Format filename pattern with {start}/{end} month placeholders."""
    return pattern.format(start=start, end=end)
