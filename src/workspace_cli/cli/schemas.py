"""Output schemas for CLI commands."""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ..core.a1 import GridRange


class CommandOutput(BaseModel):
    """Base output schema for all commands."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "command": "sheets read",
                "success": True,
                "timestamp": "2024-01-15T10:30:00Z",
                "version": "0.1.0",
                "errors": [],
            }
        }
    )

    command: str = Field(..., description="Command path (sheets read, gmail archive-thread, ...)")
    success: bool = Field(..., description="Overall success status")
    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat(), description="ISO 8601 timestamp")
    version: str = Field(..., description="CLI version")
    errors: list[str] = Field(default_factory=list, description="List of error messages")


# Sheets schemas


class SheetInfo(BaseModel):
    """One tab of a spreadsheet."""

    id: int = Field(..., description="Numeric sheet ID")
    title: str = Field(..., description="Sheet title")
    index: int = Field(0, description="Position among the spreadsheet's tabs")
    rows: int | None = Field(None, description="Grid row count")
    columns: int | None = Field(None, description="Grid column count")


class SpreadsheetInfoOutput(CommandOutput):
    """Output schema for sheets info."""

    spreadsheet_id: str = Field(..., description="Spreadsheet ID")
    title: str = Field("", description="Spreadsheet title")
    locale: str = Field("", description="Spreadsheet locale")
    timezone: str = Field("", description="Spreadsheet time zone")
    url: str = Field("", description="Spreadsheet URL")
    sheets: list[SheetInfo] = Field(default_factory=list, description="Sheets in tab order")
    sheet_count: int = Field(0, description="Number of sheets")


class SpreadsheetCreateOutput(CommandOutput):
    """Output schema for sheets create."""

    spreadsheet_id: str = Field(..., description="ID of the new spreadsheet")
    title: str = Field("", description="Spreadsheet title")
    sheets: list[str] = Field(default_factory=list, description="Sheet titles in tab order")
    sheet_count: int = Field(0, description="Number of sheets")
    url: str = Field("", description="Spreadsheet URL")


class SheetListOutput(CommandOutput):
    """Output schema for sheets list."""

    spreadsheet_id: str = Field(..., description="Spreadsheet ID")
    sheets: list[SheetInfo] = Field(default_factory=list, description="Sheets in tab order")
    count: int = Field(0, description="Number of sheets")


class ValuesOutput(CommandOutput):
    """Output schema for sheets read."""

    spreadsheet_id: str = Field(..., description="Spreadsheet ID")
    range: str = Field(..., description="Range actually read, as reported by the API")
    rows: int = Field(0, description="Number of data rows")
    headers: list[str] | None = Field(None, description="Header row when rows are keyed by it")
    data: list[Any] = Field(default_factory=list, description="Raw rows or header-keyed row objects")
    csv: str | None = Field(None, description="CSV text when --output-format csv was used")


class ValuesUpdateOutput(CommandOutput):
    """Output schema for sheets write, append and clear."""

    spreadsheet_id: str = Field(..., description="Spreadsheet ID")
    range: str = Field(..., description="Range updated, as reported by the API")
    rows_updated: int = Field(0, description="Rows written or appended")
    cells_updated: int = Field(0, description="Cells written")


class GridRangeInfo(BaseModel):
    """Zero-based, end-exclusive grid coordinates of a range."""

    sheet_id: int
    start_row_index: int
    end_row_index: int
    start_column_index: int
    end_column_index: int

    @classmethod
    def from_grid(cls, grid: GridRange) -> "GridRangeInfo":
        return cls(
            sheet_id=grid.sheet_id,
            start_row_index=grid.start_row,
            end_row_index=grid.end_row,
            start_column_index=grid.start_column,
            end_column_index=grid.end_column,
        )


class GridRangeOutput(CommandOutput):
    """Output schema for sheets grid-range."""

    spreadsheet_id: str = Field(..., description="Spreadsheet ID")
    range: str = Field(..., description="Range token as given")
    grid: GridRangeInfo = Field(..., description="Resolved grid coordinates")


class BatchUpdateOutput(CommandOutput):
    """Output schema for range-based batch update commands."""

    spreadsheet_id: str = Field(..., description="Spreadsheet ID")
    operation: str = Field(..., description="Batch request kind (mergeCells, sortRange, ...)")
    range: str | None = Field(None, description="Range token as given")
    grid: GridRangeInfo | None = Field(None, description="Resolved grid coordinates")
    details: dict[str, Any] = Field(default_factory=dict, description="Operation parameters")


# Gmail schemas


class LabelInfo(BaseModel):
    """A Gmail label."""

    id: str
    name: str
    type: str = ""


class LabelListOutput(CommandOutput):
    """Output schema for gmail labels."""

    labels: list[LabelInfo] = Field(default_factory=list, description="All labels of the mailbox")
    count: int = Field(0, description="Number of labels")


class MessageActionOutput(CommandOutput):
    """Output schema for single-message actions (label, archive, trash)."""

    message_id: str = Field(..., description="Message ID")
    action: str = Field(..., description="Action applied (label, archive, trash)")
    labels: list[str] | None = Field(None, description="Label IDs on the message afterwards")


class ArchiveThreadOutput(CommandOutput):
    """Output schema for gmail archive-thread."""

    thread_id: str = Field(..., description="Thread ID")
    archived: int = Field(0, description="Messages archived")
    failed: int = Field(0, description="Messages that could not be archived")
    total: int = Field(0, description="Messages in the thread")


class ThreadSummary(BaseModel):
    """One entry of a thread listing."""

    thread_id: str
    snippet: str = ""
    message_count: int = 0
    message_id: str = Field("", description="Latest message ID, usable with read/label/archive/trash")
    subject: str = ""
    sender: str = Field("", description="From header of the first message")
    date: str = ""
    labels: list[str] | None = None


class ThreadListOutput(CommandOutput):
    """Output schema for gmail list."""

    query: str = Field("", description="Gmail search query")
    threads: list[ThreadSummary] = Field(default_factory=list)
    count: int = Field(0, description="Number of threads returned")


class MessageDetail(BaseModel):
    """A message with its selected headers and decoded body."""

    id: str
    headers: dict[str, str] = Field(default_factory=dict)
    body: str = ""
    labels: list[str] = Field(default_factory=list)


class MessageOutput(CommandOutput):
    """Output schema for gmail read."""

    message: MessageDetail


class ThreadOutput(CommandOutput):
    """Output schema for gmail thread."""

    thread_id: str
    message_count: int = 0
    messages: list[MessageDetail] = Field(default_factory=list)


# Drive schemas


class DriveFile(BaseModel):
    """One file or folder of a listing."""

    id: str
    name: str = ""
    mime_type: str = ""
    size: int | None = Field(None, description="Size in bytes; absent for folders and native Google files")
    modified: str | None = None
    web_link: str | None = None


class DriveFileListOutput(CommandOutput):
    """Output schema for drive list and drive search."""

    folder_id: str | None = Field(None, description="Folder listed (drive list)")
    query: str | None = Field(None, description="Search text (drive search)")
    files: list[DriveFile] = Field(default_factory=list)
    count: int = Field(0, description="Number of files returned")


class DriveFileInfoOutput(CommandOutput):
    """Output schema for drive info."""

    file: DriveFile
    created: str = ""
    shared: bool = False
    download_link: str | None = None
    owners: list[str] = Field(default_factory=list, description="Owner email addresses")
    parents: list[str] = Field(default_factory=list, description="Parent folder IDs")


class DriveActivityOutput(CommandOutput):
    """Output schema for drive activity."""

    activities: list[dict[str, Any]] = Field(default_factory=list, description="Rendered activities")
    count: int = Field(0, description="Number of activities on this page")
    next_page_token: str | None = Field(None, description="Token for the next page, if any")
