"""Configuration management commands."""

from typing import Optional

import typer
from rich.console import Console

from focustimer_cli.commands.decorators import AppError, command_wrapper
from focustimer_cli.services.config_service import get_config_service
from focustimer_cli.ui.formatters import format_output, format_success
from focustimer_cli.utils.exit_codes import ERROR_CONFIG, ERROR_INVALID_ARGS

app = typer.Typer(help="Configuration management commands")
console = Console()


@app.command("view")
@command_wrapper
def view_config(
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output format (table, json, yaml)"
    ),
) -> None:
    """View current configuration."""
    svc = get_config_service()
    format_output(svc.to_dict(), output or svc.config.output.format)


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(
        ..., help="Configuration key (e.g., focus.focus_duration_minutes)"
    ),
) -> None:
    """Get a configuration value."""
    try:
        value = get_config_service().get(key)
    except KeyError as e:
        raise AppError(f"Configuration key '{key}' not found", ERROR_CONFIG) from e
    console.print(value)


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(
        ..., help="Configuration key (e.g., focus.prompt_frequency_lambda)"
    ),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    try:
        parsed = get_config_service().set(key, value)
    except KeyError as e:
        raise AppError(f"Configuration key '{key}' not found", ERROR_CONFIG) from e
    except ValueError as e:
        raise AppError(
            f"Invalid value '{value}' for '{key}': {e}", ERROR_INVALID_ARGS
        ) from e
    format_success(f"Configuration '{key}' set to '{parsed}'")


@app.command("reset")
@command_wrapper
def reset_config(
    key: Optional[str] = typer.Argument(None, help="Configuration key to reset"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        msg = "entire configuration" if not key else f"'{key}'"
        if not typer.confirm(f"Are you sure you want to reset {msg}?"):
            console.print("[yellow]Cancelled[/yellow]")
            raise typer.Exit(0)

    try:
        get_config_service().reset(key)
    except KeyError as e:
        raise AppError(f"Configuration key '{key}' not found", ERROR_CONFIG) from e

    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")
