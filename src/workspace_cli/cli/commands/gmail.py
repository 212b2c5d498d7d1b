"""Gmail commands."""

from collections.abc import Callable
from typing import Annotated

import typer

from ... import __version__
from ..context import get_app_context
from ..formatters import get_formatter
from ..output import get_output_mode
from ..schemas import (
    ArchiveThreadOutput,
    LabelInfo,
    LabelListOutput,
    MessageActionOutput,
    MessageDetail,
    MessageOutput,
    ThreadListOutput,
    ThreadOutput,
    ThreadSummary,
)
from ..utils import cli_error_handler, split_csv

MessageId = Annotated[str, typer.Argument(help="Message ID")]
ThreadId = Annotated[str, typer.Argument(help="Thread ID")]


def list_threads(
    ctx: typer.Context,
    query: Annotated[str, typer.Option("--query", "-q", help="Gmail search query")] = "",
    max_results: Annotated[int, typer.Option("--max", "-n", min=1, help="Maximum threads to return")] = 10,
    fetch_all: Annotated[bool, typer.Option("--all", help="Fetch every matching thread (ignores --max)")] = False,
    include_labels: Annotated[bool, typer.Option("--include-labels", help="Include label IDs per thread")] = False,
) -> None:
    """List threads matching a search query.

    Examples:
        gws gmail list -q "is:unread" -n 20
        gws gmail list -q "label:work" --all --include-labels
    """
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        if fetch_all:
            formatter.print_progress("Fetching all matching threads...")
        threads = get_app_context(ctx).gmail().list_threads(query, max_results, fetch_all, include_labels)
        summaries = [
            ThreadSummary(
                thread_id=thread["thread_id"],
                snippet=thread.get("snippet", ""),
                message_count=thread.get("message_count", 0),
                message_id=thread.get("message_id", ""),
                subject=thread.get("subject", ""),
                sender=thread.get("from", ""),
                date=thread.get("date", ""),
                labels=thread.get("labels"),
            )
            for thread in threads
        ]
        formatter.print_result(
            ThreadListOutput(
                command="gmail list",
                success=True,
                version=__version__,
                query=query,
                threads=summaries,
                count=len(summaries),
            )
        )


def read(ctx: typer.Context, message_id: MessageId) -> None:
    """Show one message with its headers and decoded body.

    Use the message ID reported by ``gws gmail list``.
    """
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        data = get_app_context(ctx).gmail().get_message(message_id)
        data["id"] = data["id"] or message_id
        formatter.print_result(
            MessageOutput(
                command="gmail read",
                success=True,
                version=__version__,
                message=MessageDetail(**data),
            )
        )


def thread(ctx: typer.Context, thread_id: ThreadId) -> None:
    """Show every message of a thread with its decoded body."""
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        data = get_app_context(ctx).gmail().get_thread(thread_id)
        formatter.print_result(
            ThreadOutput(
                command="gmail thread",
                success=True,
                version=__version__,
                thread_id=data["thread_id"],
                message_count=data["message_count"],
                messages=[MessageDetail(**message) for message in data["messages"]],
            )
        )


def labels(ctx: typer.Context) -> None:
    """List all labels with their IDs."""
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        data = get_app_context(ctx).gmail().list_labels()
        formatter.print_result(
            LabelListOutput(
                command="gmail labels",
                success=True,
                version=__version__,
                labels=[LabelInfo(**label) for label in data],
                count=len(data),
            )
        )


def label(
    ctx: typer.Context,
    message_id: MessageId,
    add: Annotated[str | None, typer.Option("--add", "-a", help="Comma-separated label names to add")] = None,
    remove: Annotated[str | None, typer.Option("--remove", "-r", help="Comma-separated label names to remove")] = None,
) -> None:
    """Add or remove labels on a message, by label name.

    Names are matched case-insensitively against the mailbox's labels.

    Examples:
        gws gmail label 18c2... --add Work,Important
        gws gmail label 18c2... --remove INBOX
    """
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        data = get_app_context(ctx).gmail().modify_labels(message_id, split_csv(add), split_csv(remove))
        formatter.print_result(
            MessageActionOutput(
                command="gmail label",
                success=True,
                version=__version__,
                message_id=data["message_id"],
                action="label",
                labels=data["labels"],
            )
        )


def archive(ctx: typer.Context, message_id: MessageId) -> None:
    """Archive a message (remove it from the inbox)."""
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        data = get_app_context(ctx).gmail().archive(message_id)
        formatter.print_result(
            MessageActionOutput(
                command="gmail archive",
                success=True,
                version=__version__,
                message_id=data["message_id"],
                action="archive",
                labels=data["labels"],
            )
        )


def archive_thread(ctx: typer.Context, thread_id: ThreadId) -> None:
    """Archive and mark read every message of a thread.

    Messages that fail are counted and reported; the rest are still archived.
    """
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        result = get_app_context(ctx).gmail().archive_thread(thread_id)
        errors = [f"{result.failed} message(s) could not be archived"] if result.failed else []
        for error in errors:
            formatter.print_warning(error)
        formatter.print_result(
            ArchiveThreadOutput(
                command="gmail archive-thread",
                success=result.failed == 0,
                version=__version__,
                errors=errors,
                thread_id=result.thread_id,
                archived=result.archived,
                failed=result.failed,
                total=result.total,
            )
        )


def trash(ctx: typer.Context, message_id: MessageId) -> None:
    """Move a message to the trash."""
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        data = get_app_context(ctx).gmail().trash(message_id)
        formatter.print_result(
            MessageActionOutput(
                command="gmail trash",
                success=True,
                version=__version__,
                message_id=data["message_id"],
                action="trash",
            )
        )


COMMANDS: dict[str, Callable[..., None]] = {
    "list": list_threads,
    "read": read,
    "thread": thread,
    "labels": labels,
    "label": label,
    "archive": archive,
    "archive-thread": archive_thread,
    "trash": trash,
}
