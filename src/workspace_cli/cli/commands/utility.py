"""Utility commands for workspace-cli."""

import json
from collections.abc import Callable
from pathlib import Path
from typing import Annotated, Any

import click
import typer
import yaml
from rich.console import Console

from ... import __version__

console = Console()


def _describe_params(command: click.Command) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    options: list[dict[str, Any]] = []
    arguments: list[dict[str, Any]] = []

    for param in command.params:
        param_info: dict[str, Any] = {
            "name": param.name,
            "type": str(param.type),
            "required": param.required,
            "help": getattr(param, "help", "") or "",
        }

        if param.param_type_name == "option":
            param_info["flags"] = param.opts + param.secondary_opts
            default_value = param.default
            if isinstance(default_value, Path):
                default_value = str(default_value)
            param_info["default"] = default_value
            param_info["multiple"] = param.multiple
            options.append(param_info)
        elif param.param_type_name == "argument":
            param_info["multiple"] = param.multiple
            arguments.append(param_info)

    return options, arguments


def _describe_command(name: str, command: click.Command) -> dict[str, Any]:
    info: dict[str, Any] = {"name": name, "help": command.help or ""}

    subcommands = getattr(command, "commands", None)
    if subcommands is not None:
        info["commands"] = {
            sub_name: _describe_command(sub_name, sub_command) for sub_name, sub_command in subcommands.items()
        }
        return info

    info["options"], info["arguments"] = _describe_params(command)
    return info


def dump_schema(
    ctx: typer.Context,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format (json, yaml)"),
    ] = "json",
) -> None:
    """Dump CLI schema showing all command groups, commands and options.

    Useful for documentation generation and shell completion debugging.

    Examples:
        gws dump-schema
        gws dump-schema -f yaml
    """
    root = ctx.find_root().command
    if getattr(root, "commands", None) is None:
        console.print("[red]Error: CLI app is not a command group[/red]")
        raise typer.Exit(1)

    schema: dict[str, Any] = {
        "name": "gws",
        "version": __version__,
        "description": root.help or "",
        "options": _describe_params(root)[0],
        "commands": {name: _describe_command(name, command) for name, command in root.commands.items()},
    }

    if output_format == "yaml":
        output = yaml.dump(schema, default_flow_style=False, sort_keys=False)
    else:
        output = json.dumps(schema, indent=2, default=str)
    console.print(output, markup=False, highlight=False, emoji=False, soft_wrap=True)


def version() -> None:
    """Show version information."""
    console.print(f"[bold blue]workspace-cli[/bold blue] version [green]{__version__}[/green]")


COMMANDS: dict[str, Callable[..., None]] = {
    "dump-schema": dump_schema,
    "version": version,
}
