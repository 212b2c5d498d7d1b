"""Output formatters for CLI commands."""

import json
import sys
from abc import ABC, abstractmethod
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .output import OutputMode
from .schemas import (
    ArchiveThreadOutput,
    BatchUpdateOutput,
    CommandOutput,
    DriveActivityOutput,
    DriveFileInfoOutput,
    DriveFileListOutput,
    GridRangeOutput,
    LabelListOutput,
    MessageActionOutput,
    MessageDetail,
    MessageOutput,
    SheetInfo,
    SheetListOutput,
    SpreadsheetCreateOutput,
    SpreadsheetInfoOutput,
    ThreadListOutput,
    ThreadOutput,
    ValuesOutput,
    ValuesUpdateOutput,
)


class BaseOutputFormatter(ABC):
    """Abstract base class for output formatters."""

    @abstractmethod
    def print_progress(self, message: str) -> None:
        """Print a progress message.

        Args:
            message: Progress message to display
        """

    @abstractmethod
    def print_error(self, message: str) -> None:
        """Print an error message.

        Args:
            message: Error message to display
        """

    @abstractmethod
    def print_warning(self, message: str) -> None:
        """Print a warning message.

        Args:
            message: Warning message to display
        """

    @abstractmethod
    def print_result(self, result: CommandOutput) -> None:
        """Print the final command result.

        Args:
            result: Command output schema to display
        """


class HumanOutputFormatter(BaseOutputFormatter):
    """Formatter for human-readable Rich console output."""

    def __init__(self) -> None:
        self.console = Console()

    def print_progress(self, message: str) -> None:
        self.console.print(message)

    def print_error(self, message: str) -> None:
        self.console.print(f"[red]{escape(message)}[/red]")

    def print_warning(self, message: str) -> None:
        self.console.print(f"[yellow]{escape(message)}[/yellow]")

    def print_result(self, result: CommandOutput) -> None:
        """Print the final command result with Rich formatting."""
        if isinstance(result, SpreadsheetInfoOutput):
            self._print_spreadsheet_info(result)
        elif isinstance(result, SpreadsheetCreateOutput):
            self._print_spreadsheet_created(result)
        elif isinstance(result, SheetListOutput):
            self._print_sheet_table(result.sheets, "Sheets")
        elif isinstance(result, ValuesOutput):
            self._print_values(result)
        elif isinstance(result, ValuesUpdateOutput):
            self.console.print(
                f"[green]✓ {result.command}[/green] {escape(result.range)} "
                f"[dim]({result.rows_updated} rows, {result.cells_updated} cells)[/dim]"
            )
        elif isinstance(result, BatchUpdateOutput):
            target = f" {escape(result.range)}" if result.range else ""
            self.console.print(f"[green]✓ {result.operation}[/green]{target}")
        elif isinstance(result, GridRangeOutput):
            self._print_grid_range(result)
        elif isinstance(result, LabelListOutput):
            self._print_labels(result)
        elif isinstance(result, MessageActionOutput):
            self._print_message_action(result)
        elif isinstance(result, ArchiveThreadOutput):
            self._print_archive_thread(result)
        elif isinstance(result, ThreadListOutput):
            self._print_threads(result)
        elif isinstance(result, MessageOutput):
            self._print_message(result.message)
        elif isinstance(result, ThreadOutput):
            self._print_thread(result)
        elif isinstance(result, DriveFileListOutput):
            self._print_files(result)
        elif isinstance(result, DriveFileInfoOutput):
            self._print_file_info(result)
        elif isinstance(result, DriveActivityOutput):
            self._print_activities(result)
        else:
            # Fallback for unknown result types
            self.console.print(f"[dim]{escape(result.model_dump_json(indent=2))}[/dim]")

    def _print_sheet_table(self, sheets: list[SheetInfo], title: str) -> None:
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("ID", style="dim")
        table.add_column("Title", style="green")
        table.add_column("Index")
        table.add_column("Size", style="dim")

        for sheet in sheets:
            size = f"{sheet.rows}x{sheet.columns}" if sheet.rows is not None else ""
            table.add_row(str(sheet.id), escape(sheet.title), str(sheet.index), size)

        self.console.print(table)

    def _print_spreadsheet_info(self, result: SpreadsheetInfoOutput) -> None:
        self.console.print(f"[bold]{escape(result.title)}[/bold] [dim]{result.spreadsheet_id}[/dim]")
        if result.locale or result.timezone:
            self.console.print(f"[dim]Locale: {result.locale}  Time zone: {result.timezone}[/dim]")
        if result.url:
            self.console.print(f"[blue]{result.url}[/blue]")
        self._print_sheet_table(result.sheets, f"Sheets ({result.sheet_count})")

    def _print_spreadsheet_created(self, result: SpreadsheetCreateOutput) -> None:
        self.console.print(
            f"[green]✓ Created[/green] [bold]{escape(result.title)}[/bold] [dim]{result.spreadsheet_id}[/dim]"
        )
        self.console.print(f"  Sheets: {escape(', '.join(result.sheets))}")
        if result.url:
            self.console.print(f"  [blue]{result.url}[/blue]")

    def _print_values(self, result: ValuesOutput) -> None:
        if result.csv is not None:
            self.console.print(result.csv, end="", markup=False, highlight=False, emoji=False, soft_wrap=True)
            return
        if not result.data:
            self.console.print(f"[yellow]No values in {escape(result.range)}[/yellow]")
            return

        table = Table(title=escape(result.range), show_header=result.headers is not None)
        if result.headers is not None:
            for header in result.headers:
                table.add_column(escape(header), style="green")
            for row in result.data:
                table.add_row(*(escape(str(row.get(header, ""))) for header in result.headers))
        else:
            width = max(len(row) for row in result.data)
            for _ in range(width):
                table.add_column()
            for row in result.data:
                cells = [escape(str(cell)) for cell in row]
                table.add_row(*(cells + [""] * (width - len(cells))))

        self.console.print(table)
        self.console.print(f"\n[dim]Rows: {result.rows}[/dim]")

    def _print_grid_range(self, result: GridRangeOutput) -> None:
        grid = result.grid
        self.console.print(f"[bold]{escape(result.range)}[/bold]")
        self.console.print(f"  sheet id: [cyan]{grid.sheet_id}[/cyan]")
        self.console.print(f"  rows:     [cyan]{grid.start_row_index}[/cyan]..[cyan]{grid.end_row_index}[/cyan]")
        self.console.print(
            f"  columns:  [cyan]{grid.start_column_index}[/cyan]..[cyan]{grid.end_column_index}[/cyan]"
        )

    def _print_labels(self, result: LabelListOutput) -> None:
        if not result.labels:
            self.console.print("[yellow]No labels found[/yellow]")
            return

        table = Table(title="Gmail Labels", show_header=True, header_style="bold cyan")
        table.add_column("Name", style="green")
        table.add_column("ID", style="dim")
        table.add_column("Type", style="yellow")

        for label in result.labels:
            table.add_row(escape(label.name), label.id, label.type.lower())

        self.console.print(table)
        self.console.print(f"\n[dim]Total: {result.count}[/dim]")

    def _print_message_action(self, result: MessageActionOutput) -> None:
        self.console.print(f"[green]✓ {result.action}[/green] {result.message_id}")
        if result.labels is not None:
            self.console.print(f"  [dim]Labels: {', '.join(result.labels) or '(none)'}[/dim]")

    def _print_archive_thread(self, result: ArchiveThreadOutput) -> None:
        color = "green" if result.failed == 0 else "yellow"
        self.console.print(
            f"[{color}]Archived {result.archived}/{result.total} messages[/{color}] in thread {result.thread_id}"
        )

    def _print_threads(self, result: ThreadListOutput) -> None:
        if not result.threads:
            self.console.print("[yellow]No threads found[/yellow]")
            return

        table = Table(title="Gmail Threads", show_header=True, header_style="bold cyan")
        table.add_column("Date", style="dim")
        table.add_column("From", style="green")
        table.add_column("Subject")
        table.add_column("Msgs", justify="right")
        table.add_column("Thread ID", style="dim")

        for thread in result.threads:
            table.add_row(
                escape(thread.date),
                escape(thread.sender),
                escape(thread.subject),
                str(thread.message_count),
                thread.thread_id,
            )

        self.console.print(table)
        self.console.print(f"\n[dim]Total: {result.count}[/dim]")

    def _print_message(self, message: MessageDetail) -> None:
        headers = message.headers
        self.console.rule(escape(headers.get("subject", message.id)))
        for key in ("from", "to", "cc", "date"):
            if key in headers:
                self.console.print(f"[bold]{key.capitalize()}:[/bold] {escape(headers[key])}")
        self.console.print()
        self.console.print(message.body, markup=False, highlight=False, emoji=False, soft_wrap=True)

    def _print_thread(self, result: ThreadOutput) -> None:
        for message in result.messages:
            self._print_message(message)
        self.console.print(f"\n[dim]{result.message_count} message(s) in thread {result.thread_id}[/dim]")

    def _print_files(self, result: DriveFileListOutput) -> None:
        if not result.files:
            self.console.print("[yellow]No files found[/yellow]")
            return

        title = f"Drive search: {escape(result.query)}" if result.query is not None else "Drive Files"
        table = Table(title=title, show_header=True, header_style="bold cyan")
        table.add_column("Name", style="green")
        table.add_column("Type")
        table.add_column("Size", justify="right")
        table.add_column("Modified", style="dim")
        table.add_column("ID", style="dim")

        for file in result.files:
            size = str(file.size) if file.size is not None else ""
            table.add_row(escape(file.name), file.mime_type, size, file.modified or "", file.id)

        self.console.print(table)
        self.console.print(f"\n[dim]Total: {result.count}[/dim]")

    def _print_file_info(self, result: DriveFileInfoOutput) -> None:
        file = result.file
        self.console.print(f"[bold]{escape(file.name)}[/bold] [dim]{file.id}[/dim]")
        self.console.print(f"  Type:     {file.mime_type}")
        if file.size is not None:
            self.console.print(f"  Size:     {file.size} bytes")
        self.console.print(f"  Created:  {result.created}")
        self.console.print(f"  Modified: {file.modified or ''}")
        self.console.print(f"  Shared:   {'yes' if result.shared else 'no'}")
        if result.owners:
            self.console.print(f"  Owners:   {escape(', '.join(result.owners))}")
        if file.web_link:
            self.console.print(f"  [blue]{file.web_link}[/blue]")

    def _print_activities(self, result: DriveActivityOutput) -> None:
        if not result.activities:
            self.console.print("[yellow]No activity found[/yellow]")
            return

        table = Table(title="Drive Activity", show_header=True, header_style="bold cyan")
        table.add_column("Time", style="dim")
        table.add_column("Action", style="green")
        table.add_column("Actor")
        table.add_column("Target")

        for activity in result.activities:
            when = activity.get("timestamp") or activity.get("time_range", {}).get("end", "")
            action = activity.get("primary_action", {}).get("type", "")
            actors = ", ".join(_describe_actor(a) for a in activity.get("actors", []))
            targets = ", ".join(_describe_target(t) for t in activity.get("targets", []))
            table.add_row(when, action, escape(actors), escape(targets))

        self.console.print(table)
        if result.next_page_token:
            self.console.print(f"\n[dim]More results: --page-token {result.next_page_token}[/dim]")


def _describe_actor(actor: dict[str, Any]) -> str:
    user = actor.get("user") or actor.get("impersonated_user") or {}
    return user.get("person_name") or actor.get("type", "unknown")


def _describe_target(target: dict[str, Any]) -> str:
    kind = target.get("type", "")
    detail = target.get(kind, {}) if kind else {}
    return detail.get("title") or detail.get("name") or detail.get("comment_id") or kind


class JSONOutputFormatter(BaseOutputFormatter):
    """Formatter for machine-readable JSON output.

    Only the final result goes to stdout; errors and warnings go to stderr.
    """

    def print_progress(self, message: str) -> None:
        pass

    def print_error(self, message: str) -> None:
        print(f"ERROR: {message}", file=sys.stderr)

    def print_warning(self, message: str) -> None:
        print(f"WARNING: {message}", file=sys.stderr)

    def print_result(self, result: CommandOutput) -> None:
        output = result.model_dump(mode="json", exclude_none=False)
        print(json.dumps(output, indent=2))


def get_formatter(mode: OutputMode) -> BaseOutputFormatter:
    """Get the appropriate formatter for the given output mode.

    Args:
        mode: The output mode (HUMAN or JSON)

    Returns:
        Formatter instance for the given mode
    """
    if mode == OutputMode.JSON:
        return JSONOutputFormatter()
    return HumanOutputFormatter()
