"""
Unit tests for table rendering: API result, HTML, CSV and Excel output.
"""

import io

import pytest
from openpyxl import load_workbook

from esreport.search.renderer import excel_sheet_name, render_result, to_csv, to_html, to_xlsx, visible_table
from esreport.search.schemas import LogQueryRequest
from esreport.search.table import Table


@pytest.fixture
def table():
    return Table.build(
        ["Time", "Message", "Trace"],
        [
            {"Time": "2024-01-01T00:00:00Z", "Message": "<script>alert(1)</script>", "Trace": "t-1"},
            {"Time": "2024-01-01T00:00:01Z", "Message": "a, b", "Trace": "t-2"},
        ],
    )


@pytest.fixture
def request_spec():
    return LogQueryRequest(
        index_tag="app",
        lucene_query="*",
        title="Checkout errors",
        description="Last day",
        table_headers=[{"label": "Time"}, {"label": "Message"}, {"label": "Trace", "visibility": False}],
        table_values=["@timestamp", "message", "trace.id"],
    )


class TestVisibleTable:
    def test_hidden_columns_are_dropped(self, table):
        result = visible_table(table, ["Trace"])
        assert result.columns == ("Time", "Message")
        assert "Trace" not in result.rows[0]

    def test_nothing_hidden(self, table):
        assert visible_table(table, []) == table


class TestFormats:
    def test_html_escapes_cells(self, table):
        html = to_html(table)
        assert "<table" in html
        assert "&lt;script&gt;" in html
        assert "<script>" not in html

    def test_csv_quotes_separators(self, table):
        lines = to_csv(table).splitlines()
        assert lines[0] == "Time,Message,Trace"
        assert lines[2] == '2024-01-01T00:00:01Z,"a, b",t-2'

    def test_csv_of_empty_table_has_header_only(self):
        assert to_csv(Table.build(["A", "B"])).splitlines() == ["A,B"]

    def test_xlsx_workbook(self, table):
        content = to_xlsx(table, sheet_name="A sheet name well beyond the Excel limit")
        workbook = load_workbook(io.BytesIO(content))

        sheet = workbook.active
        assert len(sheet.title) == 31
        assert [cell.value for cell in sheet[1]] == ["Time", "Message", "Trace"]
        assert sheet["A1"].font.bold
        assert sheet["C3"].value == "t-2"

    def test_xlsx_sheet_name_with_forbidden_characters(self, table):
        content = to_xlsx(table, sheet_name="Errors/Warnings [prod]")
        sheet = load_workbook(io.BytesIO(content)).active
        assert sheet.title == "Errors_Warnings _prod_"

    def test_sheet_name_falls_back_when_blank(self):
        assert excel_sheet_name("") == "Logs"
        assert excel_sheet_name("   ") == "Logs"
        assert excel_sheet_name(None) == "Logs"
        assert excel_sheet_name("a:b*c?d\\e") == "a_b_c_d_e"


class TestRenderResult:
    def test_result_shape(self, table, request_spec):
        result = render_result(table, request_spec)

        assert result.title == "Checkout errors"
        assert result.description == "Last day"
        assert result.columns == ["Time", "Message"]
        assert result.row_count == 2
        assert result.rows[1] == {"Time": "2024-01-01T00:00:01Z", "Message": "a, b"}
        assert "t-1" not in result.html
