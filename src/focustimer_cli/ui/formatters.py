"""Rendering of configuration data and one-line status messages."""

import json
from typing import Any

import yaml
from rich.table import Table

from focustimer_cli.utils.ui.console import get_console

MESSAGE_STYLES = {
    "Error": "bold red",
    "Success": "bold green",
    "Warning": "bold yellow",
    "Info": "bold blue",
}


def flatten(data: dict, prefix: str = "") -> dict[str, Any]:
    """Flatten nested dictionaries into dot-separated keys."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else key
        if isinstance(value, dict):
            flat.update(flatten(value, full_key))
        else:
            flat[full_key] = value
    return flat


def display_value(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if value is None:
        return "-"
    return str(value)


def format_output(data: Any, output_format: str = "table") -> None:
    """Print ``data`` as json, yaml or a settings table.

    json and yaml go through plain ``print`` so the output stays parseable.
    """
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str))
    elif output_format == "yaml":
        print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False))
    else:
        format_table(data)


def settings_table(data: dict) -> Table:
    """One row per dotted key, with a rule between top-level sections."""
    table = Table(show_header=True, header_style="bold", box=None)
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value")

    rows = list(flatten(data).items())
    sections = [key.split(".", 1)[0] for key, _ in rows] + [None]
    for index, (key, value) in enumerate(rows):
        last_in_section = sections[index] != sections[index + 1]
        table.add_row(key, display_value(value), end_section=last_in_section)
    return table


def format_table(data: Any) -> None:
    console = get_console()
    if not data:
        console.print("[yellow]No data to display[/yellow]")
    elif isinstance(data, dict):
        console.print(settings_table(data))
    else:
        console.print(data)


def _message(label: str, message: str) -> None:
    style = MESSAGE_STYLES[label]
    get_console().print(f"[{style}]{label}:[/{style}] {message}")


def format_error(message: str) -> None:
    _message("Error", message)


def format_success(message: str) -> None:
    _message("Success", message)


def format_warning(message: str) -> None:
    _message("Warning", message)


def format_info(message: str) -> None:
    _message("Info", message)
