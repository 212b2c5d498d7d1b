"""End-to-end tests for Sheets CLI commands."""

import json
from unittest.mock import MagicMock

import pytest
from googleapiclient.errors import HttpError
from typer.testing import CliRunner

from workspace_cli.cli.app import app
from workspace_cli.cli.context import AppContext
from workspace_cli.settings import Settings

runner = CliRunner()

SHEET2_GRID = {"sheetId": 42, "startRowIndex": 4, "endRowIndex": 9, "startColumnIndex": 2, "endColumnIndex": 5}


def _requests(service: MagicMock) -> list[dict]:
    batch_update = service.spreadsheets.return_value.batchUpdate
    batch_update.assert_called_once()
    assert batch_update.call_args.kwargs["spreadsheetId"] == "ss1"
    return batch_update.call_args.kwargs["body"]["requests"]


@pytest.mark.e2e
class TestSheetsBatchCommands:
    """Tests for range-based batch update commands."""

    def test_merge_sheet_qualified_range(self, app_context, sheets_service):
        """Test merging a range on a named sheet targets that sheet's ID."""
        result = runner.invoke(app, ["sheets", "merge", "ss1", "Sheet2!C5:E9"], obj=app_context)

        assert result.exit_code == 0, result.output
        assert _requests(sheets_service) == [{"mergeCells": {"range": SHEET2_GRID, "mergeType": "MERGE_ALL"}}]

    def test_merge_json_output(self, app_context, sheets_service):
        """Test JSON output reports the operation and resolved grid."""
        result = runner.invoke(app, ["--json", "sheets", "merge", "ss1", "Sheet2!C5:E9", "-t", "rows"], obj=app_context)

        assert result.exit_code == 0, result.output
        output = json.loads(result.stdout)
        assert output["command"] == "sheets merge"
        assert output["success"] is True
        assert output["operation"] == "mergeCells"
        assert output["grid"] == {
            "sheet_id": 42,
            "start_row_index": 4,
            "end_row_index": 9,
            "start_column_index": 2,
            "end_column_index": 5,
        }
        assert output["details"] == {"merge_type": "rows"}

    def test_unqualified_range_uses_first_sheet(self, app_context, sheets_service):
        """Test a range without sheet prefix lands on the first sheet."""
        result = runner.invoke(app, ["sheets", "unmerge", "ss1", "A1:B2"], obj=app_context)

        assert result.exit_code == 0, result.output
        assert _requests(sheets_service)[0]["unmergeCells"]["range"]["sheetId"] == 0

    def test_invalid_cell_reference(self, app_context, sheets_service):
        """Test malformed cells fail without touching the API."""
        result = runner.invoke(app, ["sheets", "merge", "ss1", "A1B2:C3"], obj=app_context)

        assert result.exit_code == 1
        assert "invalid cell reference" in result.output
        sheets_service.spreadsheets.assert_not_called()

    def test_oversized_row_is_input_error(self, app_context, sheets_service):
        """Test a row number too long to convert exits cleanly with an error."""
        result = runner.invoke(app, ["--json", "sheets", "merge", "ss1", "A1:B" + "1" * 5000], obj=app_context)

        assert result.exit_code == 1
        assert isinstance(result.exception, SystemExit)
        assert "row number out of range" in result.output
        sheets_service.spreadsheets.assert_not_called()

    def test_invalid_range(self, app_context, sheets_service):
        """Test a single cell is not a range."""
        result = runner.invoke(app, ["sheets", "set-filter", "ss1", "A1"], obj=app_context)

        assert result.exit_code == 1
        assert "invalid range format" in result.output

    def test_unknown_sheet(self, app_context, sheets_service):
        """Test an unknown sheet title is reported."""
        result = runner.invoke(app, ["sheets", "merge", "ss1", "Missing!A1:B2"], obj=app_context)

        assert result.exit_code == 1
        assert "sheet not found: Missing" in result.output
        sheets_service.spreadsheets.return_value.batchUpdate.assert_not_called()

    def test_sort(self, app_context, sheets_service):
        """Test sort uses the sheet-relative column index."""
        result = runner.invoke(
            app, ["sheets", "sort", "ss1", "Sheet2!C5:E9", "--by-column", "d", "--descending"], obj=app_context
        )

        assert result.exit_code == 0, result.output
        assert _requests(sheets_service)[0]["sortRange"]["sortSpecs"] == [
            {"dimensionIndex": 3, "sortOrder": "DESCENDING"}
        ]

    def test_sort_bad_column_skips_api(self, app_context, sheets_service):
        """Test an invalid --by-column fails before spreadsheet metadata is fetched."""
        result = runner.invoke(app, ["sheets", "sort", "ss1", "Sheet2!C5:E9", "--by-column", "4"], obj=app_context)

        assert result.exit_code == 1
        assert "invalid column" in result.output
        sheets_service.spreadsheets.assert_not_called()

    def test_freeze_named_sheet(self, app_context, sheets_service):
        """Test freeze resolves --sheet to its ID."""
        result = runner.invoke(app, ["sheets", "freeze", "ss1", "--rows", "1", "--sheet", "Q1 Budget"], obj=app_context)

        assert result.exit_code == 0, result.output
        properties = _requests(sheets_service)[0]["updateSheetProperties"]["properties"]
        assert properties == {"sheetId": 7, "gridProperties": {"frozenRowCount": 1}}

    def test_freeze_requires_counts(self, app_context, sheets_service):
        """Test freeze without --rows or --columns fails."""
        result = runner.invoke(app, ["sheets", "freeze", "ss1"], obj=app_context)

        assert result.exit_code == 1
        assert "--rows or --columns" in result.output

    def test_format(self, app_context, sheets_service):
        """Test format sends only the given attributes."""
        result = runner.invoke(
            app, ["sheets", "format", "ss1", "A1:D1", "--bold", "--bg-color", "#FFFF00"], obj=app_context
        )

        assert result.exit_code == 0, result.output
        repeat_cell = _requests(sheets_service)[0]["repeatCell"]
        assert repeat_cell["fields"] == "userEnteredFormat.textFormat.bold,userEnteredFormat.backgroundColor"

    def test_format_bad_color(self, app_context, sheets_service):
        """Test a malformed color is an input error."""
        result = runner.invoke(app, ["sheets", "format", "ss1", "A1:D1", "--color", "blue"], obj=app_context)

        assert result.exit_code == 1
        assert "invalid color" in result.output

    def test_clear_filter(self, app_context, sheets_service):
        """Test clear-filter defaults to the first sheet."""
        result = runner.invoke(app, ["sheets", "clear-filter", "ss1"], obj=app_context)

        assert result.exit_code == 0, result.output
        assert _requests(sheets_service) == [{"clearBasicFilter": {"sheetId": 0}}]

    def test_add_named_range(self, app_context, sheets_service):
        """Test named ranges carry the resolved grid."""
        result = runner.invoke(
            app, ["sheets", "add-named-range", "ss1", "Sheet2!C5:E9", "--name", "Totals"], obj=app_context
        )

        assert result.exit_code == 0, result.output
        assert _requests(sheets_service) == [{"addNamedRange": {"namedRange": {"name": "Totals", "range": SHEET2_GRID}}}]

    def test_conditional_format(self, app_context, sheets_service):
        """Test repeated --value options become condition values."""
        result = runner.invoke(
            app,
            [
                "sheets",
                "conditional-format",
                "ss1",
                "B2:B100",
                "--condition",
                "NUMBER_BETWEEN",
                "--value",
                "1",
                "--value",
                "10",
                "--bg-color",
                "#00FF00",
            ],
            obj=app_context,
        )

        assert result.exit_code == 0, result.output
        condition = _requests(sheets_service)[0]["addConditionalFormatRule"]["rule"]["booleanRule"]["condition"]
        assert condition == {
            "type": "NUMBER_BETWEEN",
            "values": [{"userEnteredValue": "1"}, {"userEnteredValue": "10"}],
        }

    def test_column_width(self, app_context, sheets_service):
        """Test column-width spans the given columns."""
        result = runner.invoke(
            app, ["sheets", "column-width", "ss1", "--columns", "B:C", "--width", "120"], obj=app_context
        )

        assert result.exit_code == 0, result.output
        dimension_range = _requests(sheets_service)[0]["updateDimensionProperties"]["range"]
        assert dimension_range == {"sheetId": 0, "dimension": "COLUMNS", "startIndex": 1, "endIndex": 3}

    def test_column_width_invalid_column(self, app_context, sheets_service):
        """Test non-letter columns are rejected."""
        result = runner.invoke(app, ["sheets", "column-width", "ss1", "--columns", "1", "--width", "120"], obj=app_context)

        assert result.exit_code == 1
        assert "invalid column" in result.output

    def test_grid_range(self, app_context, sheets_service):
        """Test grid-range prints the resolved coordinates without editing."""
        result = runner.invoke(app, ["--json", "sheets", "grid-range", "ss1", "'Q1 Budget'!A1:B2"], obj=app_context)

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["grid"]["sheet_id"] == 7
        sheets_service.spreadsheets.return_value.batchUpdate.assert_not_called()


@pytest.mark.e2e
class TestSheetsValueCommands:
    """Tests for info, list, create, read, write, append and clear."""

    def test_create(self, app_context, service):
        """Test create splits --sheet-names and reports the new spreadsheet."""
        service.spreadsheets.return_value.create.return_value.execute.return_value = {
            "spreadsheetId": "new1",
            "spreadsheetUrl": "https://docs.google.com/spreadsheets/d/new1/edit",
            "properties": {"title": "Budget"},
            "sheets": [{"properties": {"title": "Q1"}}, {"properties": {"title": "Q2"}}],
        }

        result = runner.invoke(
            app, ["--json", "sheets", "create", "--title", "Budget", "--sheet-names", "Q1, Q2"], obj=app_context
        )

        assert result.exit_code == 0, result.output
        body = service.spreadsheets.return_value.create.call_args.kwargs["body"]
        assert [sheet["properties"]["title"] for sheet in body["sheets"]] == ["Q1", "Q2"]
        output = json.loads(result.stdout)
        assert output["spreadsheet_id"] == "new1"
        assert output["sheets"] == ["Q1", "Q2"]
        assert output["sheet_count"] == 2

    def test_create_human(self, app_context, service):
        """Test the human output names the new spreadsheet."""
        service.spreadsheets.return_value.create.return_value.execute.return_value = {
            "spreadsheetId": "new1",
            "properties": {"title": "Budget"},
            "sheets": [{"properties": {"title": "Sheet1"}}],
        }

        result = runner.invoke(app, ["sheets", "create", "-t", "Budget"], obj=app_context)

        assert result.exit_code == 0, result.output
        assert "Budget" in result.stdout
        assert "new1" in result.stdout

    def test_create_requires_title(self, app_context, service):
        """Test --title is a required option."""
        result = runner.invoke(app, ["sheets", "create"], obj=app_context)

        assert result.exit_code == 2
        service.spreadsheets.assert_not_called()

    def test_list(self, app_context, sheets_service):
        """Test list shows sheet titles."""
        result = runner.invoke(app, ["--json", "sheets", "list", "ss1"], obj=app_context)

        assert result.exit_code == 0, result.output
        output = json.loads(result.stdout)
        assert output["count"] == 3
        assert [sheet["title"] for sheet in output["sheets"]] == ["Sheet1", "Sheet2", "Q1 Budget"]

    def test_info_human(self, app_context, service):
        """Test info prints the title and sheets."""
        service.spreadsheets.return_value.get.return_value.execute.return_value = {
            "spreadsheetId": "ss1",
            "properties": {"title": "Budget"},
            "sheets": [{"properties": {"sheetId": 0, "title": "Summary", "index": 0}}],
        }
        result = runner.invoke(app, ["sheets", "info", "ss1"], obj=app_context)

        assert result.exit_code == 0, result.output
        assert "Budget" in result.stdout
        assert "Summary" in result.stdout

    def test_read_json(self, app_context, service):
        """Test read keys rows by the header row."""
        service.spreadsheets.return_value.values.return_value.get.return_value.execute.return_value = {
            "range": "Sheet1!A1:B2",
            "values": [["Name", "Age"], ["Alice", "30"]],
        }
        result = runner.invoke(app, ["--json", "sheets", "read", "ss1", "Sheet1!A1:B2"], obj=app_context)

        assert result.exit_code == 0, result.output
        output = json.loads(result.stdout)
        assert output["headers"] == ["Name", "Age"]
        assert output["data"] == [{"Name": "Alice", "Age": "30"}]
        assert output["rows"] == 1

    def test_read_csv(self, app_context, service):
        """Test CSV output is printed as-is."""
        service.spreadsheets.return_value.values.return_value.get.return_value.execute.return_value = {
            "range": "A1:B2",
            "values": [["Name", "Age"], ["Alice", "30"]],
        }
        result = runner.invoke(app, ["sheets", "read", "ss1", "A1:B2", "-f", "csv"], obj=app_context)

        assert result.exit_code == 0, result.output
        assert "Name,Age\nAlice,30\n" in result.stdout

    def test_read_unknown_format(self, app_context, service):
        """Test unknown output formats are rejected."""
        result = runner.invoke(app, ["sheets", "read", "ss1", "A1:B2", "-f", "xml"], obj=app_context)

        assert result.exit_code == 1
        assert "unknown output format" in result.output

    def test_write_values(self, app_context, service):
        """Test --values rows are written with USER_ENTERED input."""
        values_api = service.spreadsheets.return_value.values.return_value
        values_api.update.return_value.execute.return_value = {
            "spreadsheetId": "ss1",
            "updatedRange": "Sheet1!A1:B2",
            "updatedRows": 2,
            "updatedCells": 4,
        }
        result = runner.invoke(
            app, ["--json", "sheets", "write", "ss1", "A1", "--values", "Name,Age;Alice,30"], obj=app_context
        )

        assert result.exit_code == 0, result.output
        assert values_api.update.call_args.kwargs["body"] == {"values": [["Name", "Age"], ["Alice", "30"]]}
        assert json.loads(result.stdout)["cells_updated"] == 4

    def test_write_without_values(self, app_context, service):
        """Test write needs --values or --values-json."""
        result = runner.invoke(app, ["sheets", "write", "ss1", "A1"], obj=app_context)

        assert result.exit_code == 1
        assert "no values provided" in result.output

    def test_append_json_values(self, app_context, service):
        """Test --values-json rows are appended."""
        values_api = service.spreadsheets.return_value.values.return_value
        values_api.append.return_value.execute.return_value = {
            "spreadsheetId": "ss1",
            "updates": {"updatedRange": "Sheet1!A3:B3", "updatedRows": 1, "updatedCells": 2},
        }
        result = runner.invoke(
            app, ["--json", "sheets", "append", "ss1", "A:B", "--values-json", '[["Bob", 25]]'], obj=app_context
        )

        assert result.exit_code == 0, result.output
        output = json.loads(result.stdout)
        assert output["command"] == "sheets append"
        assert output["rows_updated"] == 1

    def test_clear(self, app_context, service):
        """Test clear reports the cleared range."""
        service.spreadsheets.return_value.values.return_value.clear.return_value.execute.return_value = {
            "spreadsheetId": "ss1",
            "clearedRange": "Sheet1!A1:Z100",
        }
        result = runner.invoke(app, ["--json", "sheets", "clear", "ss1", "A1:Z100"], obj=app_context)

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["range"] == "Sheet1!A1:Z100"


@pytest.mark.e2e
class TestSheetsErrors:
    """Tests for API and credential failures."""

    def test_http_error(self, app_context, service):
        """Test API errors are reported with their status."""
        service.spreadsheets.return_value.get.return_value.execute.side_effect = HttpError(
            MagicMock(status=404, reason="Requested entity was not found."), b""
        )
        result = runner.invoke(app, ["sheets", "info", "missing"], obj=app_context)

        assert result.exit_code == 1
        assert "Google API error (404)" in result.output

    def test_missing_token(self, tmp_path):
        """Test a missing token file is reported instead of crashing."""
        context = AppContext.from_settings(Settings(_env_file=None, token_path=tmp_path / "absent.json"))
        result = runner.invoke(app, ["sheets", "info", "ss1"], obj=context)

        assert result.exit_code == 1
        assert "Token file not found" in result.output
