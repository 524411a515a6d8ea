# backend/utils/spreadsheet.py
"""
Tabular export sink: renders a ReportTable to xlsx (openpyxl) or csv.

Sheet layout (xlsx):
  rows 1-3  title, period and generation time, merged across the table
  row 5     column headers
  row 6..   data rows
  +1 blank  summary row ("SUMMARY:" then label/value pairs)
"""
import csv
import io
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any, List, Optional, Set, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

from utils.exceptions import InvalidInputError

DATE_FORMAT = "%d/%m/%Y"
DATE_TIME_FORMAT = "%d/%m/%Y %H:%M"
CURRENCY_FORMAT = '"R$" #,##0.00'

HEADER_ROW = 5
FIRST_DATA_ROW = HEADER_ROW + 1

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
CSV_MEDIA_TYPE = "text/csv"

_thin = Side(style="thin")
_border = Border(left=_thin, right=_thin, top=_thin, bottom=_thin)
_header_font = Font(bold=True, color="FFFFFF")
_header_fill = PatternFill(fill_type="solid", start_color="1F3864", end_color="1F3864")
_status_fill = PatternFill(fill_type="solid", start_color="FFFFE0", end_color="FFFFE0")


@dataclass
class ReportTable:
    title: str
    start: Optional[datetime]
    end: Optional[datetime]
    generated_at: datetime
    headers: List[str]
    rows: List[List[Any]] = field(default_factory=list)
    summary: List[Tuple[str, Any]] = field(default_factory=list)
    currency_columns: Set[int] = field(default_factory=set)  # 0-based column indexes
    sheet_name: str = "Report"

    def period_label(self) -> str:
        if self.start is None or self.end is None:
            return "Period: all time"
        return f"Period: {self.start.strftime(DATE_FORMAT)} to {self.end.strftime(DATE_FORMAT)}"

    def generated_label(self) -> str:
        return f"Generated at: {self.generated_at.strftime(DATE_TIME_FORMAT)}"


def media_type(fmt: str) -> str:
    return XLSX_MEDIA_TYPE if fmt == "xlsx" else CSV_MEDIA_TYPE


def render(table: ReportTable, fmt: str = "xlsx") -> bytes:
    if fmt == "xlsx":
        return render_xlsx(table)
    if fmt == "csv":
        return render_csv(table)
    raise InvalidInputError(f"Unsupported report format: {fmt}")


def render_xlsx(table: ReportTable) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = table.sheet_name[:31]
    width = len(table.headers)

    # Title block
    for row_idx, text in enumerate((table.title, table.period_label(), table.generated_label()), start=1):
        cell = ws.cell(row=row_idx, column=1, value=text)
        cell.font = _header_font
        cell.fill = _header_fill
        cell.alignment = Alignment(horizontal="center")
        ws.merge_cells(start_row=row_idx, start_column=1, end_row=row_idx, end_column=width)

    # Column headers
    for col_idx, header in enumerate(table.headers, start=1):
        cell = ws.cell(row=HEADER_ROW, column=col_idx, value=header)
        cell.font = _header_font
        cell.fill = _header_fill
        cell.border = _border
        cell.alignment = Alignment(horizontal="center")

    # Data
    row_idx = FIRST_DATA_ROW
    for values in table.rows:
        for col, value in enumerate(values):
            cell = ws.cell(row=row_idx, column=col + 1, value=value)
            cell.border = _border
            if col in table.currency_columns:
                cell.number_format = CURRENCY_FORMAT
                cell.alignment = Alignment(horizontal="right")
            elif isinstance(value, int):
                cell.alignment = Alignment(horizontal="center")
            if table.headers[col] == "Status":
                cell.fill = _status_fill
        row_idx += 1

    # Summary, one blank row below the data
    summary_row = row_idx + 1
    cell = ws.cell(row=summary_row, column=1, value="SUMMARY:")
    cell.font = _header_font
    cell.fill = _header_fill
    col = 2
    for label, value in table.summary:
        label_cell = ws.cell(row=summary_row, column=col, value=label)
        label_cell.font = _header_font
        label_cell.fill = _header_fill
        value_cell = ws.cell(row=summary_row, column=col + 1, value=value)
        value_cell.border = _border
        if isinstance(value, Decimal):
            value_cell.number_format = CURRENCY_FORMAT
        col += 2

    _autosize(ws, skip_rows={1, 2, 3})

    out = io.BytesIO()
    wb.save(out)
    return out.getvalue()


def _autosize(ws, skip_rows: Set[int]) -> None:
    widths = {}
    for row in ws.iter_rows():
        for cell in row:
            if cell.value is None or cell.row in skip_rows:
                continue
            length = len(str(cell.value))
            widths[cell.column] = max(widths.get(cell.column, 0), length)
    for column, length in widths.items():
        ws.column_dimensions[get_column_letter(column)].width = length + 2


def render_csv(table: ReportTable) -> bytes:
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow([table.title])
    writer.writerow([table.period_label()])
    writer.writerow([table.generated_label()])
    writer.writerow([])
    writer.writerow(table.headers)
    for values in table.rows:
        writer.writerow(["" if v is None else v for v in values])
    writer.writerow([])
    summary = ["SUMMARY:"]
    for label, value in table.summary:
        summary.extend([label, value])
    writer.writerow(summary)
    return buf.getvalue().encode("utf-8")
