"""Google Drive commands."""

from collections.abc import Callable
from typing import Annotated, Any

import typer

from ... import __version__
from ...core.activity import build_activity_query, query_activity
from ..context import get_app_context
from ..formatters import get_formatter
from ..output import get_output_mode
from ..schemas import DriveActivityOutput, DriveFile, DriveFileInfoOutput, DriveFileListOutput
from ..utils import cli_error_handler


MaxFiles = Annotated[int, typer.Option("--max", "-n", min=1, max=1000, help="Maximum number of files")]


def _file_list_output(command: str, files: list[dict[str, Any]], **fields: Any) -> DriveFileListOutput:
    return DriveFileListOutput(
        command=command,
        success=True,
        version=__version__,
        files=[DriveFile(**file) for file in files],
        count=len(files),
        **fields,
    )


def list_files(
    ctx: typer.Context,
    folder_id: Annotated[str, typer.Option("--folder", "-f", help="Folder ID to list")] = "root",
    max_results: MaxFiles = 50,
    order_by: Annotated[
        str, typer.Option("--order", help="Sort order, e.g. 'name' or 'modifiedTime desc'")
    ] = "modifiedTime desc",
) -> None:
    """List the files and folders inside a folder (My Drive root by default).

    Examples:
        gws drive list
        gws drive list --folder 0B1x... --order name -n 100
    """
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        files = get_app_context(ctx).drive().list_files(folder_id, max_results, order_by)
        formatter.print_result(_file_list_output("drive list", files, folder_id=folder_id))


def search(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Text to find in file names or contents")],
    max_results: MaxFiles = 50,
) -> None:
    """Search files by name and full text.

    Examples:
        gws drive search "quarterly report"
    """
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        files = get_app_context(ctx).drive().search(query, max_results)
        formatter.print_result(_file_list_output("drive search", files, query=query))


def info(ctx: typer.Context, file_id: Annotated[str, typer.Argument(help="File ID")]) -> None:
    """Show metadata of a file: type, size, owners, parents and links."""
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        data = get_app_context(ctx).drive().info(file_id)
        formatter.print_result(
            DriveFileInfoOutput(
                command="drive info",
                success=True,
                version=__version__,
                file=DriveFile(
                    id=data["id"] or file_id,
                    name=data["name"],
                    mime_type=data["mime_type"],
                    size=data.get("size"),
                    modified=data.get("modified"),
                    web_link=data.get("web_link"),
                ),
                created=data.get("created", ""),
                shared=data.get("shared", False),
                download_link=data.get("download_link"),
                owners=data.get("owners", []),
                parents=data.get("parents", []),
            )
        )


def activity(
    ctx: typer.Context,
    item_id: Annotated[str | None, typer.Option("--item-id", help="Only activity on this file or folder")] = None,
    folder_id: Annotated[
        str | None, typer.Option("--folder-id", help="Only activity on items below this folder")
    ] = None,
    days: Annotated[int, typer.Option("--days", "-d", help="Only activity from the last N days")] = 0,
    api_filter: Annotated[
        str | None, typer.Option("--filter", help='Drive Activity filter, e.g. "detail.action_detail_case:EDIT"')
    ] = None,
    max_results: Annotated[int, typer.Option("--max", "-n", min=1, max=1000, help="Activities per page")] = 50,
    page_token: Annotated[str | None, typer.Option("--page-token", help="Token of the page to fetch")] = None,
    no_consolidation: Annotated[
        bool, typer.Option("--no-consolidation", help="Return individual actions instead of grouped activities")
    ] = False,
) -> None:
    """Show recent Drive activity.

    Examples:
        gws drive activity --days 7
        gws drive activity --folder-id 0B1x... --filter "detail.action_detail_case:(CREATE EDIT)"
        gws drive activity --item-id 1AbC... --no-consolidation --json
    """
    formatter = get_formatter(get_output_mode())

    with cli_error_handler(formatter):
        body = build_activity_query(
            item_id=item_id,
            folder_id=folder_id,
            api_filter=api_filter,
            days=days,
            page_size=max_results,
            page_token=page_token,
            consolidate=not no_consolidation,
        )
        data = query_activity(get_app_context(ctx).drive_activity(), body)
        formatter.print_result(
            DriveActivityOutput(
                command="drive activity",
                success=True,
                version=__version__,
                activities=data["activities"],
                count=data["count"],
                next_page_token=data.get("next_page_token"),
            )
        )


COMMANDS: dict[str, Callable[..., None]] = {
    "list": list_files,
    "search": search,
    "info": info,
    "activity": activity,
}
