"""Terminal output for Nexus CLI commands."""

import json
from datetime import UTC, datetime
from typing import Any

from rich.console import Console
from rich.table import Table

from nexus_cli.models import (
    GoogleConnectionStatus,
    GoogleImportResult,
    ImportConflict,
    Notification,
)

console = Console()


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


def format_json(data: Any) -> None:
    print(json.dumps(data, indent=2, default=str))


def format_timestamp(value: datetime | None) -> str:
    """Local-time ``YYYY-MM-DD HH:MM`` with a relative suffix, or ``never``."""
    if value is None:
        return "never"
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return f"{value.astimezone().strftime('%Y-%m-%d %H:%M')} ({format_relative_time(value)})"


def format_relative_time(value: datetime, now: datetime | None = None) -> str:
    """Format timestamp as relative time."""
    now = now or datetime.now(UTC)
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    seconds = (now - value).total_seconds()

    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{int(seconds / 60)}m ago"
    if seconds < 86400:
        return f"{int(seconds / 3600)}h ago"
    return f"{int(seconds / 86400)}d ago"


def format_connection_status(status: GoogleConnectionStatus) -> None:
    if not status.connected:
        format_info("Google Calendar is not connected. Run 'nexus calendar connect'.")
        return

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")
    table.add_row("Status", "[green]connected[/green]")
    table.add_row("Account", status.email or "-")
    table.add_row("Connected", format_timestamp(status.connected_at))
    table.add_row("Last sync", format_timestamp(status.last_sync_at))
    console.print(table)


def format_import_summary(result: GoogleImportResult) -> None:
    table = Table(title="Google Calendar Import", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Mode", "full" if result.full_sync else "incremental")
    table.add_row("Imported", str(result.imported))
    table.add_row("Skipped", str(result.skipped))
    table.add_row(
        "Conflicts",
        f"[yellow]{len(result.conflicts)}[/yellow]" if result.has_conflicts else "0",
    )
    console.print(table)

    if result.has_conflicts:
        format_conflicts(result.conflicts)


def format_conflicts(conflicts: list[ImportConflict]) -> None:
    """Table of events changed on both sides; the local copy was kept."""
    table = Table(title="Conflicts (local copy kept)", header_style="bold yellow")
    table.add_column("Event")
    table.add_column("Local change")
    table.add_column("Google change")
    table.add_column("ID", style="dim")
    for conflict in conflicts:
        table.add_row(
            conflict.title,
            format_timestamp(conflict.local_updated_at),
            format_timestamp(conflict.google_updated_at)
            if conflict.google_updated_at
            else "unknown",
            conflict.event_id,
        )
    console.print(table)


def format_notifications(notifications: list[Notification]) -> None:
    if not notifications:
        console.print("[yellow]No notifications[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("When")
    table.add_column("Title")
    table.add_column("Message")
    for notification in notifications:
        title = notification.title
        if notification.read_at is None:
            title = f"[bold]{title}[/bold]"
        table.add_row(
            format_relative_time(notification.created_at), title, notification.message
        )
    console.print(table)
