"""CLI application for workspace-cli."""

from collections.abc import Callable, Mapping
from typing import Annotated

import typer
from rich.console import Console

from .. import __version__, configure_logging
from ..settings import settings
from .commands import GROUPS, TOP_LEVEL
from .context import AppContext
from .output import OutputMode, set_output_mode

console = Console()

APP_HELP = "workspace-cli - Google Sheets, Gmail and Drive from the command line"


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]workspace-cli[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity. Use -v for DEBUG, -vv for TRACE.",
        ),
    ] = 0,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Set log level (DEBUG, INFO, WARNING, ERROR)"),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output in JSON format (machine-readable)"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=version_callback, is_eager=True, help="Show version and exit"),
    ] = False,
) -> None:
    """workspace-cli - Google Sheets, Gmail and Drive from the command line."""
    set_output_mode(OutputMode.JSON if json_output else OutputMode.HUMAN)

    if log_level:
        level = log_level.upper()
    elif verbose >= 2:
        level = "TRACE"
    elif verbose == 1:
        level = "DEBUG"
    else:
        level = settings.log_level

    if level != settings.log_level:
        configure_logging(level, settings.log_format)

    # Tests pass their own context through CliRunner.invoke(obj=...)
    if ctx.obj is None:
        ctx.obj = AppContext.from_settings(settings)


def _register(target: typer.Typer, commands: Mapping[str, Callable[..., None]]) -> None:
    for name, handler in commands.items():
        target.command(name)(handler)


def build_app() -> typer.Typer:
    """Construct the Typer application from the command tables."""
    app = typer.Typer(
        name="gws",
        help=APP_HELP,
        add_completion=True,
        rich_markup_mode="rich",
        no_args_is_help=True,
    )
    app.callback()(main_callback)
    _register(app, TOP_LEVEL)

    for group_name, (group_help, commands) in GROUPS.items():
        group = typer.Typer(help=group_help, no_args_is_help=True)
        _register(group, commands)
        app.add_typer(group, name=group_name)

    return app


app = build_app()


if __name__ == "__main__":
    app()
