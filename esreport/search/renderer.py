# esreport/search/renderer.py
"""Output formats for a finished table: records, HTML, CSV and XLSX."""

import io
import re
from typing import Iterable

import pandas as pd

from esreport.search.schemas import LogProcessResult, LogQueryRequest
from esreport.search.table import Table

EXCEL_SHEET_NAME_LIMIT = 31
EXCEL_MAX_COLUMN_WIDTH = 50
EXCEL_SHEET_NAME_INVALID = re.compile(r"[\[\]:*?/\\]")
DEFAULT_SHEET_NAME = "Logs"


def visible_table(table: Table, hidden_columns: Iterable[str]) -> Table:
    """Drop hidden columns, keeping the order of the remaining ones."""
    hidden = set(hidden_columns)
    columns = [column for column in table.columns if column not in hidden]
    return table.with_columns(columns, table.rows)


def to_dataframe(table: Table) -> pd.DataFrame:
    return pd.DataFrame(table.to_records(), columns=list(table.columns), dtype=str)


def to_html(table: Table) -> str:
    return to_dataframe(table).to_html(index=False, border=1, na_rep="", escape=True)


def to_csv(table: Table) -> str:
    return to_dataframe(table).to_csv(index=False)


def to_xlsx(table: Table, sheet_name: str = DEFAULT_SHEET_NAME) -> bytes:
    """Excel workbook with a styled header row and fitted column widths."""
    df = to_dataframe(table)
    sheet_name = excel_sheet_name(sheet_name)

    excel_buffer = io.BytesIO()
    with pd.ExcelWriter(excel_buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
        worksheet = writer.sheets[sheet_name]
        _format_header(worksheet, len(df.columns))
        _auto_adjust_columns(worksheet)

    return excel_buffer.getvalue()


def excel_sheet_name(title: str) -> str:
    """Excel rejects some characters in sheet titles and anything past 31 characters."""
    name = EXCEL_SHEET_NAME_INVALID.sub("_", title or "").strip()[:EXCEL_SHEET_NAME_LIMIT]
    return name or DEFAULT_SHEET_NAME


def render_result(table: Table, request: LogQueryRequest) -> LogProcessResult:
    """Build the API response for the visible part of ``table``."""
    shown = visible_table(table, request.hidden_columns)
    return LogProcessResult(
        title=request.title,
        description=request.description,
        columns=list(shown.columns),
        rows=shown.to_records(),
        row_count=len(shown),
        html=to_html(shown),
    )


def _format_header(worksheet, column_count: int) -> None:
    from openpyxl.styles import Alignment, Font, PatternFill

    header_font = Font(bold=True, color="FFFFFF")
    header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
    header_alignment = Alignment(horizontal="center", vertical="center")

    for col_num in range(1, column_count + 1):
        cell = worksheet.cell(row=1, column=col_num)
        cell.font = header_font
        cell.fill = header_fill
        cell.alignment = header_alignment


def _auto_adjust_columns(worksheet) -> None:
    for column in worksheet.columns:
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        worksheet.column_dimensions[column[0].column_letter].width = min(
            max_length + 2, EXCEL_MAX_COLUMN_WIDTH
        )
