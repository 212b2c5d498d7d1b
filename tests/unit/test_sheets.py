"""Tests for Google Sheets operations."""

import pytest

from workspace_cli.core.a1 import GridRange
from workspace_cli.core.errors import (
    InvalidColumnError,
    InvalidInputError,
    SheetNotFoundError,
    WorkspaceCLIError,
)
from workspace_cli.core.sheets import SheetIndex, SheetsClient, hex_to_color, parse_column_span, parse_values

GRID = GridRange(sheet_id=42, start_column=2, start_row=4, end_column=5, end_row=9)


class TestParseValues:
    """Tests for parse_values."""

    def test_delimited(self):
        """Test ';' separates rows and ',' separates cells."""
        assert parse_values("a,b;c,d") == [["a", "b"], ["c", "d"]]

    def test_cells_trimmed(self):
        """Test whitespace around cells is removed."""
        assert parse_values(" Name , Age ; Alice,30") == [["Name", "Age"], ["Alice", "30"]]

    def test_json(self):
        """Test JSON arrays keep their value types."""
        assert parse_values(values_json='[["a", 1], [true, null]]') == [["a", 1], [True, None]]

    def test_json_takes_precedence(self):
        """Test JSON wins when both forms are given."""
        assert parse_values("x,y", '[["a"]]') == [["a"]]

    def test_invalid_json(self):
        """Test malformed JSON is an input error."""
        with pytest.raises(InvalidInputError, match="invalid JSON format"):
            parse_values(values_json="[[1, 2]")

    def test_json_must_be_2d(self):
        """Test JSON that is not an array of arrays is rejected."""
        with pytest.raises(InvalidInputError):
            parse_values(values_json='["a", "b"]')
        with pytest.raises(InvalidInputError):
            parse_values(values_json='{"a": 1}')

    def test_nothing_given(self):
        """Test no input yields no rows."""
        assert parse_values() == []


class TestHelpers:
    """Tests for color and column span helpers."""

    def test_hex_to_color(self):
        """Test hex colors become 0-1 float channels."""
        assert hex_to_color("#FF0000") == {"red": 1.0, "green": 0.0, "blue": 0.0}
        assert hex_to_color("00ff00") == {"red": 0.0, "green": 1.0, "blue": 0.0}

    @pytest.mark.parametrize("value", ["red", "#FFF", "#GG0000", ""])
    def test_hex_to_color_invalid(self, value):
        """Test malformed colors are input errors."""
        with pytest.raises(InvalidInputError, match="invalid color"):
            hex_to_color(value)

    def test_parse_column_span(self):
        """Test single columns and spans become end-exclusive index pairs."""
        assert parse_column_span("B") == (1, 2)
        assert parse_column_span("A:C") == (0, 3)
        assert parse_column_span("aa:ab") == (26, 28)

    def test_parse_column_span_invalid(self):
        """Test reversed and malformed spans."""
        with pytest.raises(InvalidInputError):
            parse_column_span("C:A")
        with pytest.raises(InvalidColumnError):
            parse_column_span("A1:C")


class TestSheetIndex:
    """Tests for SheetIndex."""

    def test_metadata_fetched_once(self, sheets_service):
        """Test repeated lookups reuse one metadata request."""
        index = SheetIndex(sheets_service, "ss1")
        assert index.sheet_id("Sheet2") == 42
        assert index.sheet_id("Q1 Budget") == 7
        assert index.first_sheet_id() == 0

        sheets_service.spreadsheets.return_value.get.assert_called_once_with(
            spreadsheetId="ss1", fields="sheets.properties(sheetId,title,index)"
        )

    def test_exact_title_match(self, sheets_service):
        """Test titles are matched exactly."""
        index = SheetIndex(sheets_service, "ss1")
        with pytest.raises(SheetNotFoundError, match="sheet not found: sheet2"):
            index.sheet_id("sheet2")

    def test_no_sheets(self, service):
        """Test a spreadsheet without sheets has no first sheet."""
        service.spreadsheets.return_value.get.return_value.execute.return_value = {}
        with pytest.raises(SheetNotFoundError):
            SheetIndex(service, "ss1").first_sheet_id()

    def test_resolve(self, sheets_service):
        """Test resolve falls back to the first sheet."""
        index = SheetIndex(sheets_service, "ss1")
        assert index.resolve(None) == 0
        assert index.resolve("Sheet2") == 42


class TestSheetsClientValues:
    """Tests for SheetsClient value operations."""

    def _set_values(self, service, values):
        service.spreadsheets.return_value.values.return_value.get.return_value.execute.return_value = {
            "range": "Sheet1!A1:B3",
            "values": values,
        }

    def test_grid_range(self, sheets_service):
        """Test range tokens resolve against the spreadsheet's sheets."""
        grid = SheetsClient(sheets_service).grid_range("ss1", "Sheet2!C5:E9")
        assert grid == GRID

    def test_info(self, service):
        """Test spreadsheet metadata is flattened."""
        service.spreadsheets.return_value.get.return_value.execute.return_value = {
            "spreadsheetId": "ss1",
            "spreadsheetUrl": "https://docs.google.com/spreadsheets/d/ss1/edit",
            "properties": {"title": "Budget", "locale": "en_US", "timeZone": "Europe/Berlin"},
            "sheets": [
                {
                    "properties": {
                        "sheetId": 0,
                        "title": "Sheet1",
                        "index": 0,
                        "gridProperties": {"rowCount": 1000, "columnCount": 26},
                    }
                }
            ],
        }
        info = SheetsClient(service).info("ss1")
        assert info["title"] == "Budget"
        assert info["timezone"] == "Europe/Berlin"
        assert info["sheet_count"] == 1
        assert info["sheets"] == [{"id": 0, "title": "Sheet1", "index": 0, "rows": 1000, "columns": 26}]

    def test_read_with_headers(self, service):
        """Test rows are keyed by the header row and short rows keep only their cells."""
        self._set_values(service, [["Name", "Age"], ["Alice", "30"], ["Bob"]])
        result = SheetsClient(service).read("ss1", "Sheet1!A1:B3")
        assert result["headers"] == ["Name", "Age"]
        assert result["data"] == [{"Name": "Alice", "Age": "30"}, {"Name": "Bob"}]
        assert result["rows"] == 2

    def test_read_single_row_is_raw(self, service):
        """Test a single row is not treated as a header row."""
        self._set_values(service, [["Name", "Age"]])
        result = SheetsClient(service).read("ss1", "A1:B1")
        assert result["data"] == [["Name", "Age"]]
        assert "headers" not in result

    def test_read_without_headers(self, service):
        """Test headers can be disabled."""
        self._set_values(service, [["Name", "Age"], ["Alice", "30"]])
        result = SheetsClient(service).read("ss1", "A1:B2", headers=False)
        assert result["data"] == [["Name", "Age"], ["Alice", "30"]]
        assert result["rows"] == 2

    def test_read_csv(self, service):
        """Test CSV output quotes cells containing commas."""
        self._set_values(service, [["Name", "Note"], ["Alice", "a, b"]])
        result = SheetsClient(service).read("ss1", "A1:B2", as_csv=True)
        assert result["csv"] == 'Name,Note\nAlice,"a, b"\n'
        assert result["rows"] == 2

    def test_read_empty(self, service):
        """Test an empty range returns no data."""
        service.spreadsheets.return_value.values.return_value.get.return_value.execute.return_value = {"range": "A1"}
        assert SheetsClient(service).read("ss1", "A1") == {"range": "A1", "data": [], "rows": 0}

    def test_write(self, service):
        """Test writes use USER_ENTERED input."""
        values_api = service.spreadsheets.return_value.values.return_value
        values_api.update.return_value.execute.return_value = {
            "spreadsheetId": "ss1",
            "updatedRange": "Sheet1!A1:B2",
            "updatedRows": 2,
            "updatedCells": 4,
        }
        result = SheetsClient(service).write("ss1", "A1", [["a", "b"], ["c", "d"]])

        values_api.update.assert_called_once_with(
            spreadsheetId="ss1",
            range="A1",
            valueInputOption="USER_ENTERED",
            body={"values": [["a", "b"], ["c", "d"]]},
        )
        assert result == {"spreadsheet": "ss1", "range": "Sheet1!A1:B2", "rows_updated": 2, "cells_updated": 4}

    def test_write_requires_values(self, service):
        """Test writing nothing is rejected before any API call."""
        with pytest.raises(InvalidInputError):
            SheetsClient(service).write("ss1", "A1", [])
        service.spreadsheets.assert_not_called()

    def test_append(self, service):
        """Test appends insert rows and report the appended range."""
        values_api = service.spreadsheets.return_value.values.return_value
        values_api.append.return_value.execute.return_value = {
            "spreadsheetId": "ss1",
            "updates": {"updatedRange": "Sheet1!A5:B5", "updatedRows": 1, "updatedCells": 2},
        }
        result = SheetsClient(service).append("ss1", "A:B", [["Bob", "25"]])

        assert values_api.append.call_args.kwargs["insertDataOption"] == "INSERT_ROWS"
        assert result["rows_appended"] == 1
        assert result["range"] == "Sheet1!A5:B5"

    def test_append_empty_response(self, service):
        """Test a response without updates is an error."""
        service.spreadsheets.return_value.values.return_value.append.return_value.execute.return_value = {}
        with pytest.raises(WorkspaceCLIError, match="unexpected empty response"):
            SheetsClient(service).append("ss1", "A:B", [["x"]])

    def test_batch_update(self, service):
        """Test requests are wrapped in a batchUpdate body."""
        SheetsClient(service).batch_update("ss1", [{"unmergeCells": {"range": GRID.to_api()}}])
        service.spreadsheets.return_value.batchUpdate.assert_called_once_with(
            spreadsheetId="ss1", body={"requests": [{"unmergeCells": {"range": GRID.to_api()}}]}
        )

    def test_create_with_sheet_names(self, service):
        """Test named sheets are created in the given order."""
        service.spreadsheets.return_value.create.return_value.execute.return_value = {
            "spreadsheetId": "new1",
            "spreadsheetUrl": "https://docs.google.com/spreadsheets/d/new1/edit",
            "properties": {"title": "Budget"},
            "sheets": [{"properties": {"title": "Q1"}}, {"properties": {"title": "Q2"}}],
        }

        result = SheetsClient(service).create("Budget", ["Q1", "Q2"])

        service.spreadsheets.return_value.create.assert_called_once_with(
            body={
                "properties": {"title": "Budget"},
                "sheets": [
                    {"properties": {"title": "Q1", "index": 0}},
                    {"properties": {"title": "Q2", "index": 1}},
                ],
            }
        )
        assert result == {
            "id": "new1",
            "title": "Budget",
            "sheets": ["Q1", "Q2"],
            "sheet_count": 2,
            "url": "https://docs.google.com/spreadsheets/d/new1/edit",
        }

    def test_create_default_sheet(self, service):
        """Test the API picks the default sheet when no names are given."""
        service.spreadsheets.return_value.create.return_value.execute.return_value = {
            "spreadsheetId": "new1",
            "properties": {"title": "Empty"},
            "sheets": [{"properties": {"title": "Sheet1"}}],
        }

        result = SheetsClient(service).create("Empty")

        service.spreadsheets.return_value.create.assert_called_once_with(body={"properties": {"title": "Empty"}})
        assert result["sheets"] == ["Sheet1"]

    def test_create_requires_title(self, service):
        """Test a blank title is rejected before any API call."""
        with pytest.raises(InvalidInputError, match="title is required"):
            SheetsClient(service).create("  ")
        service.spreadsheets.assert_not_called()


class TestBatchRequests:
    """Tests for batchUpdate request builders."""

    def test_merge(self):
        """Test merge types map to API enums."""
        assert SheetsClient.merge_request(GRID)["mergeCells"]["mergeType"] == "MERGE_ALL"
        assert SheetsClient.merge_request(GRID, "rows")["mergeCells"]["mergeType"] == "MERGE_ROWS"
        with pytest.raises(InvalidInputError, match="invalid merge type"):
            SheetsClient.merge_request(GRID, "diagonal")

    def test_sort_uses_sheet_column_index(self):
        """Test the sort column index is relative to the sheet, not the range."""
        request = SheetsClient.sort_request(GRID, "D", descending=True)
        assert request["sortRange"]["sortSpecs"] == [{"dimensionIndex": 3, "sortOrder": "DESCENDING"}]
        assert request["sortRange"]["range"] == GRID.to_api()

    def test_sort_column_outside_range(self):
        """Test sorting by a column outside the range is rejected."""
        with pytest.raises(InvalidInputError, match="outside the range"):
            SheetsClient.sort_request(GRID, "A")
        with pytest.raises(InvalidInputError):
            SheetsClient.sort_request(GRID, "F")

    def test_freeze_field_mask(self):
        """Test the field mask names only the given counts, including zero."""
        request = SheetsClient.freeze_request(42, rows=0)
        props = request["updateSheetProperties"]
        assert props["properties"] == {"sheetId": 42, "gridProperties": {"frozenRowCount": 0}}
        assert props["fields"] == "gridProperties.frozenRowCount"

        both = SheetsClient.freeze_request(42, rows=1, columns=2)["updateSheetProperties"]
        assert both["fields"] == "gridProperties.frozenRowCount,gridProperties.frozenColumnCount"

    def test_freeze_requires_counts(self):
        """Test freezing nothing is rejected."""
        with pytest.raises(InvalidInputError):
            SheetsClient.freeze_request(42)

    def test_format(self):
        """Test only the given attributes reach the cell format and field mask."""
        request = SheetsClient.format_request(GRID, bold=True, background="#FFFF00")["repeatCell"]
        assert request["cell"] == {
            "userEnteredFormat": {
                "backgroundColor": {"red": 1.0, "green": 1.0, "blue": 0.0},
                "textFormat": {"bold": True},
            }
        }
        assert request["fields"] == "userEnteredFormat.textFormat.bold,userEnteredFormat.backgroundColor"

    def test_format_unset_bold(self):
        """Test False is a real value, not a missing one."""
        request = SheetsClient.format_request(GRID, bold=False)["repeatCell"]
        assert request["cell"]["userEnteredFormat"]["textFormat"] == {"bold": False}

    def test_format_requires_options(self):
        """Test formatting without attributes is rejected."""
        with pytest.raises(InvalidInputError, match="no formatting options"):
            SheetsClient.format_request(GRID)

    def test_filters(self):
        """Test basic filter requests."""
        assert SheetsClient.set_filter_request(GRID) == {"setBasicFilter": {"filter": {"range": GRID.to_api()}}}
        assert SheetsClient.clear_filter_request(42) == {"clearBasicFilter": {"sheetId": 42}}

    def test_named_range(self):
        """Test named ranges need a non-blank name."""
        request = SheetsClient.named_range_request(GRID, " Totals ")
        assert request["addNamedRange"]["namedRange"] == {"name": "Totals", "range": GRID.to_api()}
        with pytest.raises(InvalidInputError):
            SheetsClient.named_range_request(GRID, "  ")

    def test_conditional_format(self):
        """Test boolean rules are inserted first with their values."""
        request = SheetsClient.conditional_format_request(GRID, "number_greater", ["100"], "#FF0000")
        rule = request["addConditionalFormatRule"]
        assert rule["index"] == 0
        assert rule["rule"]["ranges"] == [GRID.to_api()]
        assert rule["rule"]["booleanRule"]["condition"] == {
            "type": "NUMBER_GREATER",
            "values": [{"userEnteredValue": "100"}],
        }

    def test_conditional_format_unknown_condition(self):
        """Test unsupported condition types are rejected."""
        with pytest.raises(InvalidInputError, match="unsupported condition type"):
            SheetsClient.conditional_format_request(GRID, "BIGGER", [], "#FF0000")

    def test_column_width(self):
        """Test column widths span the given columns."""
        request = SheetsClient.column_width_request(42, "A:C", 150)["updateDimensionProperties"]
        assert request["range"] == {"sheetId": 42, "dimension": "COLUMNS", "startIndex": 0, "endIndex": 3}
        assert request["properties"] == {"pixelSize": 150}
        with pytest.raises(InvalidInputError):
            SheetsClient.column_width_request(42, "A", 0)
