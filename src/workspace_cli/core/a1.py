"""A1-notation parsing for Google Sheets ranges.

Converts the cell and range tokens typed on the command line into the
zero-based, end-exclusive coordinates used by the Sheets ``batchUpdate`` API.

Examples::

    >>> parse_cell_ref("C5")
    CellRef(column=2, row=4)
    >>> parse_cell_range("A1:D10")
    (0, 0, 4, 10)
    >>> column_letter_to_index("AA")
    26

Only the fully bounded ``<cell>:<cell>`` form is accepted. Open-ended ranges
such as ``A:C`` or ``1:5`` are passed to the values API as plain strings and
never reach this module.
"""

import re
from dataclasses import dataclass
from typing import Protocol

from .errors import InvalidCellReferenceError, InvalidColumnError, InvalidRangeError

_CELL_RE = re.compile(r"([A-Za-z]+)([0-9]+)", re.ASCII)
_COLUMN_RE = re.compile(r"[A-Za-z]+", re.ASCII)


@dataclass(frozen=True)
class CellRef:
    """Zero-based column and row of a single cell."""

    column: int
    row: int


@dataclass(frozen=True)
class GridRange:
    """Rectangular region of one sheet.

    Start indices are inclusive and end indices exclusive, all zero-based.
    """

    sheet_id: int
    start_column: int
    start_row: int
    end_column: int
    end_row: int

    def to_api(self) -> dict[str, int]:
        """Serialize to the Sheets API ``GridRange`` object."""
        return {
            "sheetId": self.sheet_id,
            "startRowIndex": self.start_row,
            "endRowIndex": self.end_row,
            "startColumnIndex": self.start_column,
            "endColumnIndex": self.end_column,
        }

    @property
    def width(self) -> int:
        return self.end_column - self.start_column

    @property
    def height(self) -> int:
        return self.end_row - self.start_row


class SheetLookup(Protocol):
    """Resolves sheet titles of one spreadsheet to numeric sheet IDs."""

    def sheet_id(self, name: str) -> int: ...

    def first_sheet_id(self) -> int: ...


def _letters_to_index(letters: str) -> int:
    value = 0
    for char in letters:
        value = value * 26 + (ord(char) - ord("A") + 1)
    return value - 1


def column_letter_to_index(letters: str) -> int:
    """Convert a column label such as ``"B"`` or ``"AA"`` to a zero-based index.

    Raises:
        InvalidColumnError: If the token is empty or contains anything but letters.
    """
    stripped = letters.strip()
    if not _COLUMN_RE.fullmatch(stripped):
        raise InvalidColumnError(letters)
    return _letters_to_index(stripped.upper())


def parse_cell_ref(token: str) -> CellRef:
    """Parse a single cell token like ``"A1"`` or ``"aa100"``.

    The token must be one run of letters followed by one run of digits.
    Interleaved tokens such as ``"A1B2"`` or reversed ones such as ``"1A"``
    are rejected rather than scanned leniently.

    Raises:
        InvalidCellReferenceError: If the token is malformed or the row is 0.
    """
    match = _CELL_RE.fullmatch(token.strip())
    if not match:
        raise InvalidCellReferenceError(token, "expected column letters followed by a row number")

    letters, digits = match.groups()
    try:
        row = int(digits)
    except ValueError as e:
        raise InvalidCellReferenceError(token, "row number out of range") from e
    if row < 1:
        raise InvalidCellReferenceError(token, "rows start at 1")

    return CellRef(column=_letters_to_index(letters.upper()), row=row - 1)


def parse_cell_range(token: str) -> tuple[int, int, int, int]:
    """Parse ``"<cell>:<cell>"`` into ``(start_column, start_row, end_column, end_row)``.

    End values are exclusive, so ``"A1:A1"`` spans exactly one cell.

    Raises:
        InvalidRangeError: If the token does not have exactly two endpoints or
            the end cell lies above or left of the start cell.
        InvalidCellReferenceError: If either endpoint is malformed.
    """
    parts = token.split(":")
    if len(parts) != 2:
        raise InvalidRangeError(token)

    start = parse_cell_ref(parts[0])
    end = parse_cell_ref(parts[1])
    if end.column < start.column or end.row < start.row:
        raise InvalidRangeError(token, "end cell must not precede start cell")

    return start.column, start.row, end.column + 1, end.row + 1


def split_sheet_name(token: str) -> tuple[str | None, str]:
    """Split an optional ``SheetName!`` prefix from a range token.

    Quoted titles (``'Q1 Budget'!A1:B2``) are unquoted, with doubled single
    quotes collapsed as in the Sheets UI.
    """
    stripped = token.strip()
    if "!" not in stripped:
        return None, stripped

    sheet, _, cells = stripped.rpartition("!")
    sheet = sheet.strip()
    if len(sheet) >= 2 and sheet.startswith("'") and sheet.endswith("'"):
        sheet = sheet[1:-1].replace("''", "'")
    if not sheet:
        raise InvalidRangeError(token, "empty sheet name")
    return sheet, cells


def parse_range(token: str, lookup: SheetLookup) -> GridRange:
    """Resolve a possibly sheet-qualified range token to a :class:`GridRange`.

    Without a sheet prefix the range is placed on the first sheet. Errors from
    ``lookup`` (missing sheet, HTTP failures) propagate unchanged.
    """
    sheet_name, cells = split_sheet_name(token)
    start_column, start_row, end_column, end_row = parse_cell_range(cells)

    if sheet_name is not None:
        sheet_id = lookup.sheet_id(sheet_name)
    else:
        sheet_id = lookup.first_sheet_id()

    return GridRange(
        sheet_id=sheet_id,
        start_column=start_column,
        start_row=start_row,
        end_column=end_column,
        end_row=end_row,
    )

