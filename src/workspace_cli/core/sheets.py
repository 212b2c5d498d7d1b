"""Google Sheets operations."""

import csv
import io
import json
import re
from typing import Any

from loguru import logger

from .a1 import GridRange, column_letter_to_index, parse_range
from .errors import InvalidInputError, SheetNotFoundError, WorkspaceCLIError

_HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")

MERGE_TYPES = {
    "all": "MERGE_ALL",
    "columns": "MERGE_COLUMNS",
    "rows": "MERGE_ROWS",
}

# Boolean condition types accepted by the conditional-format command
CONDITION_TYPES = {
    "NUMBER_GREATER",
    "NUMBER_GREATER_THAN_EQ",
    "NUMBER_LESS",
    "NUMBER_LESS_THAN_EQ",
    "NUMBER_EQ",
    "NUMBER_NOT_EQ",
    "NUMBER_BETWEEN",
    "TEXT_CONTAINS",
    "TEXT_NOT_CONTAINS",
    "TEXT_STARTS_WITH",
    "TEXT_ENDS_WITH",
    "TEXT_EQ",
    "BLANK",
    "NOT_BLANK",
    "CUSTOM_FORMULA",
}


def hex_to_color(value: str) -> dict[str, float]:
    """Convert ``#RRGGBB`` to a Sheets ``Color`` with 0-1 float channels."""
    match = _HEX_COLOR_RE.match(value.strip())
    if not match:
        raise InvalidInputError(f"invalid color: {value!r} (expected #RRGGBB)")
    red, green, blue = (int(channel, 16) / 255 for channel in match.groups())
    return {"red": red, "green": green, "blue": blue}


def parse_values(values: str | None = None, values_json: str | None = None) -> list[list[Any]]:
    """Parse cell values from ``"a,b;c,d"`` or a JSON 2-D array.

    JSON takes precedence when both are given.
    """
    if values_json:
        try:
            parsed = json.loads(values_json)
        except json.JSONDecodeError as e:
            raise InvalidInputError(f"invalid JSON format: {e}") from e
        if not isinstance(parsed, list) or not all(isinstance(row, list) for row in parsed):
            raise InvalidInputError("JSON values must be an array of arrays")
        return parsed

    if values:
        return [[cell.strip() for cell in row.split(",")] for row in values.split(";")]

    return []


def parse_column_span(columns: str) -> tuple[int, int]:
    """Parse ``"B"`` or ``"A:C"`` into a zero-based, end-exclusive column span."""
    start, _, end = columns.partition(":")
    start_index = column_letter_to_index(start)
    end_index = column_letter_to_index(end) if end else start_index
    if end_index < start_index:
        raise InvalidInputError(f"invalid column span: {columns!r} (end precedes start)")
    return start_index, end_index + 1


class SheetIndex:
    """Sheet titles and IDs of one spreadsheet, fetched once on first use."""

    def __init__(self, service: Any, spreadsheet_id: str):
        self.service = service
        self.spreadsheet_id = spreadsheet_id
        self._sheets: list[dict[str, Any]] | None = None

    @property
    def sheets(self) -> list[dict[str, Any]]:
        if self._sheets is None:
            logger.debug(f"Fetching sheet metadata for {self.spreadsheet_id}")
            response = (
                self.service.spreadsheets()
                .get(spreadsheetId=self.spreadsheet_id, fields="sheets.properties(sheetId,title,index)")
                .execute()
            )
            self._sheets = [sheet.get("properties", {}) for sheet in response.get("sheets", [])]
        return self._sheets

    def sheet_id(self, name: str) -> int:
        for props in self.sheets:
            if props.get("title") == name:
                return int(props.get("sheetId", 0))
        raise SheetNotFoundError(name)

    def first_sheet_id(self) -> int:
        if not self.sheets:
            raise SheetNotFoundError("(first sheet)")
        return int(self.sheets[0].get("sheetId", 0))

    def resolve(self, name: str | None) -> int:
        """Sheet ID for ``name``, or the first sheet when no name is given."""
        return self.sheet_id(name) if name else self.first_sheet_id()


def _sheet_summary(sheet: dict[str, Any]) -> dict[str, Any]:
    props = sheet.get("properties", {})
    info: dict[str, Any] = {
        "id": props.get("sheetId", 0),
        "title": props.get("title", ""),
        "index": props.get("index", 0),
    }
    grid = props.get("gridProperties")
    if grid:
        info["rows"] = grid.get("rowCount", 0)
        info["columns"] = grid.get("columnCount", 0)
    return info


class SheetsClient:
    """Spreadsheet reads, writes and range-based batch updates over a ``sheets v4`` service."""

    def __init__(self, service: Any):
        self.service = service

    # Lookup

    def sheet_index(self, spreadsheet_id: str) -> SheetIndex:
        return SheetIndex(self.service, spreadsheet_id)

    def grid_range(self, spreadsheet_id: str, range_token: str, index: SheetIndex | None = None) -> GridRange:
        """Parse a range token and resolve its sheet within ``spreadsheet_id``."""
        return parse_range(range_token, index or self.sheet_index(spreadsheet_id))

    # Metadata and values

    def info(self, spreadsheet_id: str) -> dict[str, Any]:
        spreadsheet = self.service.spreadsheets().get(spreadsheetId=spreadsheet_id).execute()
        props = spreadsheet.get("properties", {})
        sheets = [_sheet_summary(sheet) for sheet in spreadsheet.get("sheets", [])]
        return {
            "id": spreadsheet.get("spreadsheetId", spreadsheet_id),
            "title": props.get("title", ""),
            "locale": props.get("locale", ""),
            "timezone": props.get("timeZone", ""),
            "sheets": sheets,
            "sheet_count": len(sheets),
            "url": spreadsheet.get("spreadsheetUrl", ""),
        }

    def list_sheets(self, spreadsheet_id: str) -> list[dict[str, Any]]:
        spreadsheet = self.service.spreadsheets().get(spreadsheetId=spreadsheet_id).execute()
        return [_sheet_summary(sheet) for sheet in spreadsheet.get("sheets", [])]

    def create(self, title: str, sheet_names: list[str] | None = None) -> dict[str, Any]:
        """Create a spreadsheet, optionally with named tabs in the given order.

        Without ``sheet_names`` the API adds a single default sheet.
        """
        if not title.strip():
            raise InvalidInputError("a spreadsheet title is required")

        body: dict[str, Any] = {"properties": {"title": title}}
        if sheet_names:
            body["sheets"] = [{"properties": {"title": name, "index": i}} for i, name in enumerate(sheet_names)]

        logger.debug(f"Creating spreadsheet {title!r} with sheets {sheet_names or '(default)'}")
        created = self.service.spreadsheets().create(body=body).execute()
        titles = [sheet.get("properties", {}).get("title", "") for sheet in created.get("sheets", [])]
        return {
            "id": created.get("spreadsheetId", ""),
            "title": created.get("properties", {}).get("title", title),
            "sheets": titles,
            "sheet_count": len(titles),
            "url": created.get("spreadsheetUrl", ""),
        }

    def read(
        self, spreadsheet_id: str, range_name: str, headers: bool = True, as_csv: bool = False
    ) -> dict[str, Any]:
        """Read values, keyed by the header row when there is more than one row."""
        response = self.service.spreadsheets().values().get(spreadsheetId=spreadsheet_id, range=range_name).execute()
        rows: list[list[Any]] = response.get("values", [])
        result: dict[str, Any] = {"range": response.get("range", range_name)}

        if not rows:
            result.update(data=[], rows=0)
            return result

        if as_csv:
            buffer = io.StringIO()
            writer = csv.writer(buffer, lineterminator="\n")
            for row in rows:
                writer.writerow([str(cell) for cell in row])
            result.update(csv=buffer.getvalue(), rows=len(rows))
            return result

        if headers and len(rows) > 1:
            header_row = [str(cell) for cell in rows[0]]
            data = [
                {header_row[i]: cell for i, cell in enumerate(row) if i < len(header_row)} for row in rows[1:]
            ]
            result.update(headers=header_row, data=data, rows=len(data))
            return result

        result.update(data=rows, rows=len(rows))
        return result

    def write(self, spreadsheet_id: str, range_name: str, values: list[list[Any]]) -> dict[str, Any]:
        if not values:
            raise InvalidInputError("no values provided; use --values or --values-json")
        response = (
            self.service.spreadsheets()
            .values()
            .update(
                spreadsheetId=spreadsheet_id,
                range=range_name,
                valueInputOption="USER_ENTERED",
                body={"values": values},
            )
            .execute()
        )
        return {
            "spreadsheet": response.get("spreadsheetId", spreadsheet_id),
            "range": response.get("updatedRange", range_name),
            "rows_updated": response.get("updatedRows", 0),
            "cells_updated": response.get("updatedCells", 0),
        }

    def append(self, spreadsheet_id: str, range_name: str, values: list[list[Any]]) -> dict[str, Any]:
        if not values:
            raise InvalidInputError("no values provided; use --values or --values-json")
        response = (
            self.service.spreadsheets()
            .values()
            .append(
                spreadsheetId=spreadsheet_id,
                range=range_name,
                valueInputOption="USER_ENTERED",
                insertDataOption="INSERT_ROWS",
                body={"values": values},
            )
            .execute()
        )
        updates = response.get("updates")
        if not updates:
            raise WorkspaceCLIError("unexpected empty response from API")
        return {
            "spreadsheet": response.get("spreadsheetId", spreadsheet_id),
            "range": updates.get("updatedRange", range_name),
            "rows_appended": updates.get("updatedRows", 0),
            "cells_updated": updates.get("updatedCells", 0),
        }

    def clear(self, spreadsheet_id: str, range_name: str) -> dict[str, Any]:
        values = self.service.spreadsheets().values()
        response = values.clear(spreadsheetId=spreadsheet_id, range=range_name, body={}).execute()
        return {
            "spreadsheet": response.get("spreadsheetId", spreadsheet_id),
            "range": response.get("clearedRange", range_name),
        }

    # Batch updates

    def batch_update(self, spreadsheet_id: str, requests: list[dict[str, Any]]) -> dict[str, Any]:
        logger.debug(f"batchUpdate on {spreadsheet_id}: {[next(iter(r)) for r in requests]}")
        return (
            self.service.spreadsheets()
            .batchUpdate(spreadsheetId=spreadsheet_id, body={"requests": requests})
            .execute()
        )

    @staticmethod
    def merge_request(grid: GridRange, merge_type: str = "all") -> dict[str, Any]:
        if merge_type not in MERGE_TYPES:
            raise InvalidInputError(f"invalid merge type: {merge_type!r} (expected one of {', '.join(MERGE_TYPES)})")
        return {"mergeCells": {"range": grid.to_api(), "mergeType": MERGE_TYPES[merge_type]}}

    @staticmethod
    def unmerge_request(grid: GridRange) -> dict[str, Any]:
        return {"unmergeCells": {"range": grid.to_api()}}

    @staticmethod
    def sort_request(grid: GridRange, column: str, descending: bool = False) -> dict[str, Any]:
        index = column_letter_to_index(column)
        if not grid.start_column <= index < grid.end_column:
            raise InvalidInputError(f"sort column {column.upper()} is outside the range")
        order = "DESCENDING" if descending else "ASCENDING"
        return {
            "sortRange": {
                "range": grid.to_api(),
                "sortSpecs": [{"dimensionIndex": index, "sortOrder": order}],
            }
        }

    @staticmethod
    def freeze_request(sheet_id: int, rows: int | None = None, columns: int | None = None) -> dict[str, Any]:
        if rows is None and columns is None:
            raise InvalidInputError("at least one of --rows or --columns is required")
        grid_properties: dict[str, int] = {}
        fields: list[str] = []
        if rows is not None:
            grid_properties["frozenRowCount"] = rows
            fields.append("gridProperties.frozenRowCount")
        if columns is not None:
            grid_properties["frozenColumnCount"] = columns
            fields.append("gridProperties.frozenColumnCount")
        return {
            "updateSheetProperties": {
                "properties": {"sheetId": sheet_id, "gridProperties": grid_properties},
                "fields": ",".join(fields),
            }
        }

    @staticmethod
    def format_request(
        grid: GridRange,
        bold: bool | None = None,
        italic: bool | None = None,
        font_size: int | None = None,
        color: str | None = None,
        background: str | None = None,
    ) -> dict[str, Any]:
        """Build a ``repeatCell`` request whose field mask covers only the given attributes."""
        text_format: dict[str, Any] = {}
        cell_format: dict[str, Any] = {}
        fields: list[str] = []

        if bold is not None:
            text_format["bold"] = bold
            fields.append("userEnteredFormat.textFormat.bold")
        if italic is not None:
            text_format["italic"] = italic
            fields.append("userEnteredFormat.textFormat.italic")
        if font_size is not None:
            text_format["fontSize"] = font_size
            fields.append("userEnteredFormat.textFormat.fontSize")
        if color is not None:
            text_format["foregroundColor"] = hex_to_color(color)
            fields.append("userEnteredFormat.textFormat.foregroundColor")
        if background is not None:
            cell_format["backgroundColor"] = hex_to_color(background)
            fields.append("userEnteredFormat.backgroundColor")

        if not fields:
            raise InvalidInputError("no formatting options given")
        if text_format:
            cell_format["textFormat"] = text_format

        return {
            "repeatCell": {
                "range": grid.to_api(),
                "cell": {"userEnteredFormat": cell_format},
                "fields": ",".join(fields),
            }
        }

    @staticmethod
    def set_filter_request(grid: GridRange) -> dict[str, Any]:
        return {"setBasicFilter": {"filter": {"range": grid.to_api()}}}

    @staticmethod
    def clear_filter_request(sheet_id: int) -> dict[str, Any]:
        return {"clearBasicFilter": {"sheetId": sheet_id}}

    @staticmethod
    def named_range_request(grid: GridRange, name: str) -> dict[str, Any]:
        if not name.strip():
            raise InvalidInputError("named range requires a name")
        return {"addNamedRange": {"namedRange": {"name": name.strip(), "range": grid.to_api()}}}

    @staticmethod
    def conditional_format_request(
        grid: GridRange, condition: str, values: list[str], background: str
    ) -> dict[str, Any]:
        condition_type = condition.upper()
        if condition_type not in CONDITION_TYPES:
            raise InvalidInputError(f"unsupported condition type: {condition}")
        boolean_condition: dict[str, Any] = {"type": condition_type}
        if values:
            boolean_condition["values"] = [{"userEnteredValue": value} for value in values]
        return {
            "addConditionalFormatRule": {
                "rule": {
                    "ranges": [grid.to_api()],
                    "booleanRule": {
                        "condition": boolean_condition,
                        "format": {"backgroundColor": hex_to_color(background)},
                    },
                },
                "index": 0,
            }
        }

    @staticmethod
    def column_width_request(sheet_id: int, columns: str, width: int) -> dict[str, Any]:
        if width <= 0:
            raise InvalidInputError("column width must be a positive number of pixels")
        start, end = parse_column_span(columns)
        return {
            "updateDimensionProperties": {
                "range": {"sheetId": sheet_id, "dimension": "COLUMNS", "startIndex": start, "endIndex": end},
                "properties": {"pixelSize": width},
                "fields": "pixelSize",
            }
        }
