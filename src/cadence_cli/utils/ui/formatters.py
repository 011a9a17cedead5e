"""Output formatters for different formats."""

import json
from datetime import datetime
from typing import Any

import yaml
from rich.console import Console
from rich.table import Table

console = Console()

OUTPUT_FORMATS = ("pretty", "table", "json", "yaml")


def format_output(data: Any, output_format: str = "pretty", title: str | None = None) -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str, ensure_ascii=False))
    elif output_format == "yaml":
        print(yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True))
    elif output_format == "table":
        format_table(data)
    else:
        format_pretty(data, title=title)


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:g}"
    return str(value)


def format_table(data: Any, title: str | None = None) -> None:
    """Format data as a table."""
    if not data:
        console.print("[yellow]No data to display[/yellow]")
        return

    if isinstance(data, list):
        if isinstance(data[0], dict):
            format_dict_table(data, title=title)
        else:
            for item in data:
                console.print(item)
    elif isinstance(data, dict):
        format_single_item(data)
    else:
        console.print(data)


def format_dict_table(items: list[dict], title: str | None = None) -> None:
    """Format a list of dictionaries as a table."""
    if not items:
        console.print("[yellow]No items found[/yellow]")
        return

    columns = list(items[0].keys())
    table = Table(show_header=True, header_style="bold magenta", title=title)
    for col in columns:
        table.add_column(col.replace("_", " ").title())

    for item in items:
        table.add_row(*(_cell(item.get(col)) for col in columns))

    console.print(table)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    for key, value in item.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                table.add_row(f"{key}.{sub_key}", _cell(sub_value))
        else:
            table.add_row(key, _cell(value))

    console.print(table)


def format_pretty(data: Any, title: str | None = None) -> None:
    """Tables for lists, key-value listing for single items."""
    if not data:
        console.print("[yellow]Nothing to show[/yellow]")
        return
    if isinstance(data, list) and isinstance(data[0], dict):
        format_dict_table(data, title=title)
    elif isinstance(data, dict):
        if title:
            console.print(f"[bold]{title}[/bold]")
        format_single_item(data)
    else:
        format_table(data, title=title)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


def format_duration(seconds: int) -> str:
    """Human duration such as ``1h 05m`` or ``4m 30s``."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    if minutes:
        return f"{minutes}m {secs:02d}s"
    return f"{secs}s"


def format_relative_time(epoch_ms: int, now_ms: int | None = None) -> str:
    """How long ago an epoch-millisecond timestamp was, e.g. ``5 minutes ago``."""
    if now_ms is None:
        now_ms = int(datetime.now().timestamp() * 1000)
    minutes = max(0, (now_ms - epoch_ms) // 60000)
    if minutes < 1:
        return "just now"
    if minutes < 60:
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    days = hours // 24
    return f"{days} day{'s' if days != 1 else ''} ago"


def get_progress_bar(percentage: float, width: int = 10) -> str:
    """Get a progress bar representation."""
    filled = int(width * max(0.0, min(100.0, percentage)) / 100)
    return "▓" * filled + "░" * (width - filled)
