"""Common CLI utilities."""

from collections.abc import Iterator
from contextlib import contextmanager

import typer
from googleapiclient.errors import HttpError
from loguru import logger

from ..core.errors import WorkspaceCLIError
from .formatters import BaseOutputFormatter


@contextmanager
def cli_error_handler(formatter: BaseOutputFormatter) -> Iterator[None]:
    """Report expected failures through ``formatter`` and exit with code 1.

    Args:
        formatter: Formatter of the current output mode

    Raises:
        typer.Exit: With code 1 for input, lookup, API and token errors
    """
    try:
        yield
    except typer.Exit:
        raise
    except WorkspaceCLIError as e:
        formatter.print_error(f"Error: {e}")
        raise typer.Exit(1) from e
    except HttpError as e:
        logger.debug(f"Google API request failed: {e}")
        formatter.print_error(f"Google API error ({e.resp.status}): {e.reason}")
        raise typer.Exit(1) from e
    except FileNotFoundError as e:
        formatter.print_error(f"Error: {e}")
        raise typer.Exit(1) from e


def split_csv(value: str | None) -> list[str]:
    """Split a comma-separated option value, dropping blank items."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
