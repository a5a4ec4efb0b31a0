"""
Rich console utilities for dual-mode CLI output.

Human Mode (--format text):
    - Colored status lines and Rich tables
Agent Mode (--format json):
    - Structured JSON on stdout, no ANSI codes

Examples:
    >>> from version_ledger.utils.console import output_mode, success
    >>> output_mode.format = "json"
    >>> success("Version set")      # Buffers to JSON
    >>> output_mode.flush_json()    # Outputs JSON to stdout
"""

from __future__ import annotations

import json
import sys
from typing import Any

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from version_ledger.storage.version_table import Feature, VersionRecord


class OutputMode:
    """
    Output mode configuration for dual-mode CLI.

    Attributes:
        format: Output format - "text" (human) or "json" (agent)
        _json_buffer: Internal buffer for JSON output in agent mode
    """

    def __init__(self, format_type: str = "text"):
        if format_type not in ["text", "json"]:
            raise ValueError(f"Invalid format: {format_type}. Must be 'text' or 'json'")

        self._format = format_type
        self._json_buffer: dict[str, Any] = {}

    @property
    def format(self) -> str:
        return self._format

    @format.setter
    def format(self, value: str) -> None:
        if value not in ["text", "json"]:
            raise ValueError(f"Invalid format: {value}. Must be 'text' or 'json'")
        self._format = value

    def is_human(self) -> bool:
        return self._format == "text"

    def is_agent(self) -> bool:
        return self._format == "json"

    def add_json(self, key: str, value: Any) -> None:
        """Add key-value pair to the JSON buffer (flushed by flush_json())."""
        self._json_buffer[key] = value

    def flush_json(self) -> None:
        """
        Output buffered JSON to stdout and clear buffer.

        Only outputs in agent mode. In human mode, this is a no-op.
        """
        if self.is_agent() and self._json_buffer:
            json.dump(self._json_buffer, sys.stdout, indent=2)
            sys.stdout.write("\n")
            sys.stdout.flush()
            self._json_buffer.clear()


# Global output mode instance (set by CLI flags)
output_mode = OutputMode()

console = Console()  # stdout
console_err = Console(stderr=True)  # stderr


def success(message: str) -> None:
    """Print a success message (green checkmark), or buffer it in agent mode."""
    if output_mode.is_human():
        console.print(f"[green]✓[/green] {escape(message)}")
    else:
        output_mode.add_json("status", "success")
        output_mode.add_json("message", message)


def error(message: str) -> None:
    """Print an error message to stderr (red X), or buffer it in agent mode."""
    if output_mode.is_human():
        console_err.print(f"[red]✗[/red] {escape(message)}", style="red")
    else:
        output_mode.add_json("status", "error")
        output_mode.add_json("error", message)


def info(message: str) -> None:
    """Print an info message. Silent in agent mode."""
    if output_mode.is_human():
        console.print(f"[blue]ℹ[/blue] {escape(message)}")


def feature_label(feature: int) -> str:
    """Return the Feature name for known values, else the bare integer."""
    try:
        return Feature(feature).name
    except ValueError:
        return str(feature)


def print_versions_table(records: list[VersionRecord]) -> None:
    """
    Print recorded versions.

    Human mode: Rich table with one row per (feature, instance)
    Agent mode: Buffer records as a JSON array under "versions"
    """
    if output_mode.is_agent():
        output_mode.add_json(
            "versions",
            [
                {
                    "feature": int(record.feature),
                    "feature_name": feature_label(record.feature),
                    "instance_uid": record.instance_uid,
                    "version": record.version,
                }
                for record in records
            ],
        )
        return

    if not records:
        info("No versions recorded")
        return

    table = Table(title="Recorded Versions", box=box.ROUNDED)
    table.add_column("Feature", style="cyan", no_wrap=True)
    table.add_column("Instance", style="magenta")
    table.add_column("Version", justify="right", style="green")

    for record in records:
        table.add_row(
            feature_label(record.feature), escape(record.instance_uid), str(record.version)
        )

    console.print(table)
