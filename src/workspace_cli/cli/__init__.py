"""Command-line interface for workspace-cli."""
