"""Core Google Workspace operations, independent of the CLI."""

from .a1 import CellRef, GridRange, column_letter_to_index, parse_cell_range, parse_cell_ref, parse_range
from .client import ClientFactory
from .drive import DriveClient
from .errors import (
    InvalidCellReferenceError,
    InvalidColumnError,
    InvalidInputError,
    InvalidRangeError,
    LabelNotFoundError,
    NotFoundError,
    SheetNotFoundError,
    WorkspaceCLIError,
)
from .gmail import GmailClient, resolve_label_ids
from .sheets import SheetIndex, SheetsClient, parse_values

__all__ = [
    "CellRef",
    "ClientFactory",
    "DriveClient",
    "GmailClient",
    "GridRange",
    "InvalidCellReferenceError",
    "InvalidColumnError",
    "InvalidInputError",
    "InvalidRangeError",
    "LabelNotFoundError",
    "NotFoundError",
    "SheetIndex",
    "SheetNotFoundError",
    "SheetsClient",
    "WorkspaceCLIError",
    "column_letter_to_index",
    "parse_cell_range",
    "parse_cell_ref",
    "parse_range",
    "parse_values",
    "resolve_label_ids",
]
