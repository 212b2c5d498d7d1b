"""workspace-cli - Google Workspace from the command line.

This package provides:
- ``gws`` CLI: Sheets, Gmail and Drive activity commands
- ``workspace_cli.core``: A1 range parsing and thin clients over the Google APIs

CLI usage::

    gws sheets read <spreadsheet-id> "Sheet1!A1:D10"
    gws sheets merge <spreadsheet-id> "Sheet2!C5:E9"
    gws gmail label <message-id> --add Work --remove INBOX
    gws drive activity --days 7 --json
"""

import sys

from loguru import logger

__version__ = "0.1.0"

__all__ = ["__version__", "configure_logging", "main"]

PRETTY_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan> - <level>{message}</level>"
)


def configure_logging(level: str, log_format: str = "pretty") -> None:
    """Replace loguru's sinks with a single stderr sink.

    Args:
        level: Minimum log level (TRACE, DEBUG, INFO, WARNING, ERROR)
        log_format: ``pretty`` for colored lines, ``json`` for serialized records
    """
    logger.remove()
    if log_format == "json":
        logger.add(sys.stderr, format="{message}", serialize=True, level=level)
    else:
        logger.add(sys.stderr, format=PRETTY_FORMAT, level=level, colorize=True)


def main() -> None:
    """CLI entry point."""
    from rich.console import Console

    from .cli.app import app
    from .settings import settings

    configure_logging(settings.log_level, settings.log_format)

    console = Console()

    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)
    except Exception as e:
        logger.exception("Unexpected error occurred")
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)
