"""CLI commands for workspace-cli, grouped into per-service command tables."""

from . import drive, gmail, sheets, utility

# Group name -> (help text, command table)
GROUPS = {
    "sheets": ("Read, write and format Google Sheets", sheets.COMMANDS),
    "gmail": ("List, read, label and archive Gmail messages", gmail.COMMANDS),
    "drive": ("List, search and inspect Drive files and their activity", drive.COMMANDS),
}

TOP_LEVEL = utility.COMMANDS

__all__ = ["GROUPS", "TOP_LEVEL"]
