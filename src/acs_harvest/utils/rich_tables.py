# ABOUTME: Rich table utilities for run summaries and status displays
# ABOUTME: Provides pre-configured table generators for common data display patterns

from typing import Any

from rich.box import ROUNDED
from rich.console import Console
from rich.table import Table


def create_key_value_table(
    title: str,
    data: dict[str, Any],
    title_style: str = "bold cyan",
    key_style: str = "bold blue",
    value_style: str = "green",
    box_style=ROUNDED,
) -> Table:
    """Create a key-value table.

    Args:
        title: Table title
        data: Dictionary of key-value pairs to display
        title_style: Style for the table title
        key_style: Style for the key column
        value_style: Style for the value column
        box_style: Border style for the table

    Returns:
        Formatted Rich table ready for printing
    """
    table = Table(
        title=f"[{title_style}]{title}[/{title_style}]",
        box=box_style,
        show_header=True,
        header_style="bold magenta",
        border_style="cyan",
        title_justify="left",
        expand=False,
    )

    table.add_column("Field", style=key_style, no_wrap=False)
    table.add_column("Value", style=value_style, no_wrap=False)

    for key, value in data.items():
        table.add_row(key, str(value))

    return table


def create_run_summary_table(title: str, stats: dict[str, int], dataset_size: int | None = None) -> Table:
    """Summarize a harvest or reconciliation run."""
    data: dict[str, Any] = {
        "Processed": stats.get("processed", 0),
        "Matched": stats.get("matched", 0),
        "Not found": stats.get("not_found", 0),
        "No ACS data": stats.get("no_data", 0),
        "Failed": stats.get("failed", 0),
    }
    if dataset_size is not None:
        data["Dataset size"] = dataset_size
    return create_key_value_table(title, data)


def create_logging_status_table(status: dict[str, Any]) -> Table:
    """Show the active logging mode and log file locations."""
    data = {
        "Mode": status["mode"],
        "Log directory": status["log_directory"] or "-",
    }
    for name, path in status["log_files"].items():
        data[f"{name.title()} log"] = path or "-"
    data["Suppressed loggers"] = ", ".join(status["third_party_suppressed"])
    return create_key_value_table("Logging Configuration", data)


def print_rich_table(console: Console, table: Table) -> None:
    """Print a table with a blank line before it."""
    console.print()
    console.print(table)
