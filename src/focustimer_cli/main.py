"""Main entry point for FocusTimer CLI."""

import typer
from rich.console import Console

from focustimer_cli import __version__
from focustimer_cli.commands import config, focus
from focustimer_cli.utils.logger import log_file_path

app = typer.Typer(
    name="focustimer",
    help="Focus/rest timer with randomized attention checks",
    no_args_is_help=True,
)

console = Console()


# Add subcommands
app.add_typer(focus.app, name="focus", help="Run and simulate focus sessions")
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]FocusTimer CLI[/bold] version [cyan]{__version__}[/cyan]")
    console.print(f"[dim]Log file: {log_file_path()}[/dim]", soft_wrap=True)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
