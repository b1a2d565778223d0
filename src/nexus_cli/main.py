"""Main entry point for Nexus CLI."""

import typer

from nexus_cli import __version__
from nexus_cli.commands import calendar_command, config_command
from nexus_cli.utils.ui.formatters import console

app = typer.Typer(
    name="nexus",
    help="Nexus command-line client with Google Calendar import",
    no_args_is_help=True,
)

app.add_typer(calendar_command.app, name="calendar", help="Google Calendar integration")
app.add_typer(config_command.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]Nexus CLI[/bold] version [cyan]{__version__}[/cyan]")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
