"""Google Sheets commands."""

from collections.abc import Callable
from typing import Annotated, Any

import typer

from ... import __version__
from ...core.a1 import GridRange, column_letter_to_index
from ...core.errors import InvalidInputError
from ...core.sheets import SheetsClient, parse_values
from ..context import get_app_context
from ..formatters import get_formatter
from ..output import get_output_mode
from ..schemas import (
    BatchUpdateOutput,
    GridRangeInfo,
    GridRangeOutput,
    SheetInfo,
    SheetListOutput,
    SpreadsheetCreateOutput,
    SpreadsheetInfoOutput,
    ValuesOutput,
    ValuesUpdateOutput,
)
from ..utils import cli_error_handler, split_csv

SpreadsheetId = Annotated[str, typer.Argument(help="Spreadsheet ID")]
RangeArg = Annotated[str, typer.Argument(metavar="RANGE", help="Range in A1 notation, e.g. 'Sheet1!A1:D10'")]
SheetOption = Annotated[str | None, typer.Option("--sheet", "-s", help="Sheet title (default: first sheet)")]
ValuesOption = Annotated[str | None, typer.Option("--values", help="Values: comma-separated cells, ';' between rows")]
ValuesJsonOption = Annotated[
    str | None, typer.Option("--values-json", help="Values as a JSON array of arrays, e.g. '[[\"a\",\"b\"]]'")
]


def info(ctx: typer.Context, spreadsheet_id: SpreadsheetId) -> None:
    """Show spreadsheet metadata and its sheets.

    Examples:
        gws sheets info 1AbC...xyz
    """
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        data = get_app_context(ctx).sheets().info(spreadsheet_id)
        formatter.print_result(
            SpreadsheetInfoOutput(
                command="sheets info",
                success=True,
                version=__version__,
                spreadsheet_id=data["id"],
                title=data["title"],
                locale=data["locale"],
                timezone=data["timezone"],
                url=data["url"],
                sheets=[SheetInfo(**sheet) for sheet in data["sheets"]],
                sheet_count=data["sheet_count"],
            )
        )


def list_sheets(ctx: typer.Context, spreadsheet_id: SpreadsheetId) -> None:
    """List the sheets (tabs) of a spreadsheet."""
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        sheets = get_app_context(ctx).sheets().list_sheets(spreadsheet_id)
        formatter.print_result(
            SheetListOutput(
                command="sheets list",
                success=True,
                version=__version__,
                spreadsheet_id=spreadsheet_id,
                sheets=[SheetInfo(**sheet) for sheet in sheets],
                count=len(sheets),
            )
        )


def create(
    ctx: typer.Context,
    title: Annotated[str, typer.Option("--title", "-t", help="Spreadsheet title")],
    sheet_names: Annotated[
        str | None, typer.Option("--sheet-names", help="Comma-separated sheet titles (default: one sheet)")
    ] = None,
) -> None:
    """Create a new spreadsheet.

    Examples:
        gws sheets create --title "Budget 2024"
        gws sheets create -t "Budget 2024" --sheet-names "Q1,Q2,Q3,Q4"
    """
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        data = get_app_context(ctx).sheets().create(title, split_csv(sheet_names))
        formatter.print_result(
            SpreadsheetCreateOutput(
                command="sheets create",
                success=True,
                version=__version__,
                spreadsheet_id=data["id"],
                title=data["title"],
                sheets=data["sheets"],
                sheet_count=data["sheet_count"],
                url=data["url"],
            )
        )


def read(
    ctx: typer.Context,
    spreadsheet_id: SpreadsheetId,
    range_name: RangeArg,
    output_format: Annotated[str, typer.Option("--output-format", "-f", help="Output format: json or csv")] = "json",
    headers: Annotated[
        bool, typer.Option("--headers/--no-headers", help="Key rows by the first row (json output)")
    ] = True,
) -> None:
    """Read values from a range.

    Examples:
        gws sheets read 1AbC...xyz "Sheet1!A1:D10"
        gws sheets read 1AbC...xyz "A:C" -f csv
    """
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        if output_format not in ("json", "csv"):
            raise InvalidInputError(f"unknown output format: {output_format} (expected json or csv)")

        data = get_app_context(ctx).sheets().read(spreadsheet_id, range_name, headers, output_format == "csv")
        formatter.print_result(
            ValuesOutput(
                command="sheets read",
                success=True,
                version=__version__,
                spreadsheet_id=spreadsheet_id,
                range=data["range"],
                rows=data["rows"],
                headers=data.get("headers"),
                data=data.get("data", []),
                csv=data.get("csv"),
            )
        )


def _update_values(
    ctx: typer.Context,
    command: str,
    spreadsheet_id: str,
    range_name: str,
    values: str | None,
    values_json: str | None,
) -> None:
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        rows = parse_values(values, values_json)
        client = get_app_context(ctx).sheets()
        if command == "append":
            data = client.append(spreadsheet_id, range_name, rows)
            rows_updated = data["rows_appended"]
        else:
            data = client.write(spreadsheet_id, range_name, rows)
            rows_updated = data["rows_updated"]

        formatter.print_result(
            ValuesUpdateOutput(
                command=f"sheets {command}",
                success=True,
                version=__version__,
                spreadsheet_id=data["spreadsheet"],
                range=data["range"],
                rows_updated=rows_updated,
                cells_updated=data["cells_updated"],
            )
        )


def write(
    ctx: typer.Context,
    spreadsheet_id: SpreadsheetId,
    range_name: RangeArg,
    values: ValuesOption = None,
    values_json: ValuesJsonOption = None,
) -> None:
    """Write values to a range, overwriting existing cells.

    Examples:
        gws sheets write 1AbC...xyz "Sheet1!A1" --values "Name,Age;Alice,30"
        gws sheets write 1AbC...xyz "A1:B2" --values-json '[["a","b"],["c","d"]]'
    """
    _update_values(ctx, "write", spreadsheet_id, range_name, values, values_json)


def append(
    ctx: typer.Context,
    spreadsheet_id: SpreadsheetId,
    range_name: RangeArg,
    values: ValuesOption = None,
    values_json: ValuesJsonOption = None,
) -> None:
    """Append rows after the last row of a table.

    Examples:
        gws sheets append 1AbC...xyz "Sheet1!A:B" --values "Bob,25"
    """
    _update_values(ctx, "append", spreadsheet_id, range_name, values, values_json)


def clear(ctx: typer.Context, spreadsheet_id: SpreadsheetId, range_name: RangeArg) -> None:
    """Clear the values of a range, keeping formatting."""
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        data = get_app_context(ctx).sheets().clear(spreadsheet_id, range_name)
        formatter.print_result(
            ValuesUpdateOutput(
                command="sheets clear",
                success=True,
                version=__version__,
                spreadsheet_id=data["spreadsheet"],
                range=data["range"],
            )
        )


def grid_range(ctx: typer.Context, spreadsheet_id: SpreadsheetId, range_name: RangeArg) -> None:
    """Resolve a range to its sheet ID and zero-based grid coordinates.

    Examples:
        gws sheets grid-range 1AbC...xyz "Sheet2!C5:E9"
    """
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        grid = get_app_context(ctx).sheets().grid_range(spreadsheet_id, range_name)
        formatter.print_result(
            GridRangeOutput(
                command="sheets grid-range",
                success=True,
                version=__version__,
                spreadsheet_id=spreadsheet_id,
                range=range_name,
                grid=GridRangeInfo.from_grid(grid),
            )
        )


def _apply_range_request(
    ctx: typer.Context,
    command: str,
    spreadsheet_id: str,
    range_name: str,
    build_request: Callable[[GridRange], dict[str, Any]],
    details: dict[str, Any] | None = None,
) -> None:
    """Resolve ``range_name``, build one batch request from it and send it."""
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        client = get_app_context(ctx).sheets()
        grid = client.grid_range(spreadsheet_id, range_name)
        request = build_request(grid)
        client.batch_update(spreadsheet_id, [request])
        formatter.print_result(
            BatchUpdateOutput(
                command=f"sheets {command}",
                success=True,
                version=__version__,
                spreadsheet_id=spreadsheet_id,
                operation=next(iter(request)),
                range=range_name,
                grid=GridRangeInfo.from_grid(grid),
                details=details or {},
            )
        )


def _apply_sheet_request(
    ctx: typer.Context,
    command: str,
    spreadsheet_id: str,
    sheet: str | None,
    build_request: Callable[[int], dict[str, Any]],
    details: dict[str, Any] | None = None,
) -> None:
    """Resolve ``sheet`` (or the first sheet), build one batch request from its ID and send it."""
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        client = get_app_context(ctx).sheets()
        sheet_id = client.sheet_index(spreadsheet_id).resolve(sheet)
        request = build_request(sheet_id)
        client.batch_update(spreadsheet_id, [request])
        formatter.print_result(
            BatchUpdateOutput(
                command=f"sheets {command}",
                success=True,
                version=__version__,
                spreadsheet_id=spreadsheet_id,
                operation=next(iter(request)),
                details={"sheet_id": sheet_id, **(details or {})},
            )
        )


def merge(
    ctx: typer.Context,
    spreadsheet_id: SpreadsheetId,
    range_name: RangeArg,
    merge_type: Annotated[str, typer.Option("--type", "-t", help="Merge type: all, columns or rows")] = "all",
) -> None:
    """Merge the cells of a range.

    Examples:
        gws sheets merge 1AbC...xyz "Sheet1!A1:C1"
        gws sheets merge 1AbC...xyz "A1:C3" --type rows
    """
    _apply_range_request(
        ctx,
        "merge",
        spreadsheet_id,
        range_name,
        lambda grid: SheetsClient.merge_request(grid, merge_type),
        {"merge_type": merge_type},
    )


def unmerge(ctx: typer.Context, spreadsheet_id: SpreadsheetId, range_name: RangeArg) -> None:
    """Unmerge all merged cells within a range."""
    _apply_range_request(ctx, "unmerge", spreadsheet_id, range_name, SheetsClient.unmerge_request)


def sort(
    ctx: typer.Context,
    spreadsheet_id: SpreadsheetId,
    range_name: RangeArg,
    by_column: Annotated[str, typer.Option("--by-column", "-c", help="Column letter to sort by")],
    descending: Annotated[bool, typer.Option("--descending", "-d", help="Sort in descending order")] = False,
) -> None:
    """Sort the rows of a range by one column.

    Examples:
        gws sheets sort 1AbC...xyz "Sheet1!A2:D100" --by-column B --descending
    """
    with cli_error_handler(get_formatter(get_output_mode())):
        column_letter_to_index(by_column)

    _apply_range_request(
        ctx,
        "sort",
        spreadsheet_id,
        range_name,
        lambda grid: SheetsClient.sort_request(grid, by_column, descending),
        {"column": by_column.upper(), "descending": descending},
    )


def freeze(
    ctx: typer.Context,
    spreadsheet_id: SpreadsheetId,
    rows: Annotated[int | None, typer.Option("--rows", "-r", min=0, help="Rows to freeze")] = None,
    columns: Annotated[int | None, typer.Option("--columns", "-c", min=0, help="Columns to freeze")] = None,
    sheet: SheetOption = None,
) -> None:
    """Freeze leading rows and/or columns of a sheet.

    Examples:
        gws sheets freeze 1AbC...xyz --rows 1
        gws sheets freeze 1AbC...xyz --rows 0 --columns 2 --sheet Data
    """
    details = {key: value for key, value in (("rows", rows), ("columns", columns)) if value is not None}
    _apply_sheet_request(
        ctx,
        "freeze",
        spreadsheet_id,
        sheet,
        lambda sheet_id: SheetsClient.freeze_request(sheet_id, rows, columns),
        details,
    )


def format_cells(
    ctx: typer.Context,
    spreadsheet_id: SpreadsheetId,
    range_name: RangeArg,
    bold: Annotated[bool | None, typer.Option("--bold/--no-bold", help="Set or clear bold")] = None,
    italic: Annotated[bool | None, typer.Option("--italic/--no-italic", help="Set or clear italic")] = None,
    font_size: Annotated[int | None, typer.Option("--font-size", min=1, help="Font size in points")] = None,
    color: Annotated[str | None, typer.Option("--color", help="Text color (#RRGGBB)")] = None,
    bg_color: Annotated[str | None, typer.Option("--bg-color", help="Background color (#RRGGBB)")] = None,
) -> None:
    """Format the cells of a range. Only the given attributes are changed.

    Examples:
        gws sheets format 1AbC...xyz "Sheet1!A1:D1" --bold --bg-color "#FFFF00"
    """
    details = {
        key: value
        for key, value in (
            ("bold", bold),
            ("italic", italic),
            ("font_size", font_size),
            ("color", color),
            ("bg_color", bg_color),
        )
        if value is not None
    }
    _apply_range_request(
        ctx,
        "format",
        spreadsheet_id,
        range_name,
        lambda grid: SheetsClient.format_request(grid, bold, italic, font_size, color, bg_color),
        details,
    )


def set_filter(ctx: typer.Context, spreadsheet_id: SpreadsheetId, range_name: RangeArg) -> None:
    """Set the basic filter of a sheet to a range."""
    _apply_range_request(ctx, "set-filter", spreadsheet_id, range_name, SheetsClient.set_filter_request)


def clear_filter(ctx: typer.Context, spreadsheet_id: SpreadsheetId, sheet: SheetOption = None) -> None:
    """Remove the basic filter from a sheet."""
    _apply_sheet_request(ctx, "clear-filter", spreadsheet_id, sheet, SheetsClient.clear_filter_request)


def add_named_range(
    ctx: typer.Context,
    spreadsheet_id: SpreadsheetId,
    range_name: RangeArg,
    name: Annotated[str, typer.Option("--name", "-n", help="Name for the range")],
) -> None:
    """Define a named range.

    Examples:
        gws sheets add-named-range 1AbC...xyz "Sheet1!A1:B10" --name Totals
    """
    _apply_range_request(
        ctx,
        "add-named-range",
        spreadsheet_id,
        range_name,
        lambda grid: SheetsClient.named_range_request(grid, name),
        {"name": name},
    )


def conditional_format(
    ctx: typer.Context,
    spreadsheet_id: SpreadsheetId,
    range_name: RangeArg,
    condition: Annotated[
        str, typer.Option("--condition", help="Condition type, e.g. NUMBER_GREATER, TEXT_CONTAINS, CUSTOM_FORMULA")
    ],
    bg_color: Annotated[str, typer.Option("--bg-color", help="Background color (#RRGGBB) for matching cells")],
    value: Annotated[
        list[str] | None, typer.Option("--value", help="Condition value; repeat for conditions taking two")
    ] = None,
) -> None:
    """Highlight cells of a range matching a condition.

    Examples:
        gws sheets conditional-format 1AbC...xyz "B2:B100" --condition NUMBER_GREATER --value 100 --bg-color "#FF0000"
    """
    values = value or []
    _apply_range_request(
        ctx,
        "conditional-format",
        spreadsheet_id,
        range_name,
        lambda grid: SheetsClient.conditional_format_request(grid, condition, values, bg_color),
        {"condition": condition.upper(), "values": values, "bg_color": bg_color},
    )


def column_width(
    ctx: typer.Context,
    spreadsheet_id: SpreadsheetId,
    columns: Annotated[str, typer.Option("--columns", "-c", help="Column or span, e.g. B or A:C")],
    width: Annotated[int, typer.Option("--width", "-w", help="Width in pixels")],
    sheet: SheetOption = None,
) -> None:
    """Set the pixel width of one or more columns.

    Examples:
        gws sheets column-width 1AbC...xyz --columns A:C --width 150
    """
    _apply_sheet_request(
        ctx,
        "column-width",
        spreadsheet_id,
        sheet,
        lambda sheet_id: SheetsClient.column_width_request(sheet_id, columns, width),
        {"columns": columns.upper(), "width": width},
    )


COMMANDS: dict[str, Callable[..., None]] = {
    "info": info,
    "list": list_sheets,
    "create": create,
    "read": read,
    "write": write,
    "append": append,
    "clear": clear,
    "grid-range": grid_range,
    "merge": merge,
    "unmerge": unmerge,
    "sort": sort,
    "freeze": freeze,
    "format": format_cells,
    "set-filter": set_filter,
    "clear-filter": clear_filter,
    "add-named-range": add_named_range,
    "conditional-format": conditional_format,
    "column-width": column_width,
}
