"""Terminal output for docupload.

Tables, JSON and status lines rendered with Rich. Status lines go to stderr
so ``--output json`` stays machine-readable on stdout.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from enum import Enum
from typing import Any

from rich.console import Console
from rich.progress import (
    BarColumn,
    DownloadColumn,
    Progress,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
    TransferSpeedColumn,
)
from rich.table import Table

# =============================================================================
# Console Instances
# =============================================================================

console = Console()
err_console = Console(stderr=True)


class OutputFormat(Enum):
    """Output format options."""

    JSON = "json"
    TABLE = "table"

    @classmethod
    def from_string(cls, value: str) -> OutputFormat:
        return cls(value.lower())


# =============================================================================
# Structured Output
# =============================================================================


def _cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, (list, dict)):
        return json.dumps(value, default=str)
    return str(value)


def print_table(
    rows: Sequence[dict[str, Any]],
    columns: Sequence[str],
    *,
    title: str | None = None,
    column_labels: dict[str, str] | None = None,
) -> None:
    """Print rows as a Rich table.

    Args:
        rows: Row dictionaries.
        columns: Keys to show, in order.
        title: Optional table title.
        column_labels: Header overrides keyed by column.
    """
    if not rows:
        console.print("[dim]Nothing uploaded[/dim]")
        return

    labels = column_labels or {}
    table = Table(title=title, show_header=True, header_style="bold")
    for col in columns:
        table.add_column(labels.get(col, col.replace("_", " ").title()))
    for row in rows:
        table.add_row(*(_cell(row.get(col)) for col in columns))

    console.print(table)


def print_key_value(data: dict[str, Any], *, title: str | None = None) -> None:
    """Print a mapping as aligned ``label  value`` lines."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    if not data:
        return

    width = max(len(key) for key in data)
    for key, value in data.items():
        label = key.replace("_", " ").title()
        shown = "[dim]-[/dim]" if value is None else _cell(value)
        console.print(f"  {label:<{width}}  {shown}")


def print_json(data: Any, *, indent: int = 2) -> None:
    print(json.dumps(data, indent=indent, default=str))


def print_output(
    data: Any,
    *,
    format: OutputFormat = OutputFormat.TABLE,
    columns: Sequence[str] | None = None,
    column_labels: dict[str, str] | None = None,
    title: str | None = None,
    quiet: bool = False,
    id_field: str = "id",
) -> None:
    """Print data in the requested format.

    In quiet mode only the ``id_field`` of each item is printed, one per line.
    """
    if quiet:
        items = data if isinstance(data, list) else [data]
        for item in items:
            print(item.get(id_field, "") if isinstance(item, dict) else item)
        return

    if format == OutputFormat.JSON:
        print_json(data)
    elif isinstance(data, list) and columns:
        print_table(data, columns, title=title, column_labels=column_labels)
    elif isinstance(data, dict):
        print_key_value(data, title=title)
    else:
        print_json(data)


# =============================================================================
# Status Messages
# =============================================================================


def print_error(message: str) -> None:
    """Print error message to stderr."""
    err_console.print(f"[red]Error:[/red] {message}")


def print_warning(message: str) -> None:
    """Print warning message to stderr."""
    err_console.print(f"[yellow]Warning:[/yellow] {message}")


def print_success(message: str) -> None:
    err_console.print(f"[green]✓[/green] {message}")


# =============================================================================
# Progress
# =============================================================================


def create_progress(*, transient: bool = False) -> Progress:
    """Create a per-file upload progress display.

    Task totals are byte counts; advance them with uploaded bytes.
    """
    return Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        DownloadColumn(),
        TransferSpeedColumn(),
        TimeRemainingColumn(),
        console=err_console,
        transient=transient,
    )
