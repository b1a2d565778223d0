"""Google Calendar integration commands."""

from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import typer

from nexus_cli.adapters.sqlite import (
    SqliteEventRepository,
    SqliteNotificationRepository,
    SqliteUserRepository,
)
from nexus_cli.errors import ConfigurationError, ValidationError
from nexus_cli.services.config_service import ConfigService, get_config_service
from nexus_cli.services.google import (
    GoogleCalendarClient,
    GoogleCalendarConnectionService,
    GoogleCalendarSyncService,
    TokenManager,
    build_authorization_url,
    encode_state,
)
from nexus_cli.utils.ui.formatters import (
    console,
    format_connection_status,
    format_import_summary,
    format_info,
    format_json,
    format_notifications,
    format_success,
    format_warning,
)

from .decorators import command_wrapper

app = typer.Typer(help="Google Calendar integration commands", no_args_is_help=True)


def _google_client(config_service: ConfigService) -> GoogleCalendarClient:
    google = config_service.google
    if not google.is_configured:
        raise ConfigurationError(
            "Google OAuth is not configured. Set NEXUS_GOOGLE_CLIENT_ID and "
            "NEXUS_GOOGLE_CLIENT_SECRET or run 'nexus config set google.client_id ...'"
        )
    return GoogleCalendarClient(
        google.client_id,
        google.client_secret,
        calendar_id=google.calendar_id,
        page_size=google.page_size,
        sync_window=google.sync_window,
        timeout=google.timeout,
    )


def get_connection_service() -> GoogleCalendarConnectionService:
    config_service = get_config_service()
    return GoogleCalendarConnectionService(
        _google_client(config_service),
        SqliteUserRepository(str(config_service.db_path)),
        redirect_uri=config_service.google.redirect_uri,
    )


def get_sync_service() -> GoogleCalendarSyncService:
    config_service = get_config_service()
    google = config_service.google
    db_path = str(config_service.db_path)
    client = _google_client(config_service)
    user_repo = SqliteUserRepository(db_path)
    return GoogleCalendarSyncService(
        client,
        user_repo,
        SqliteEventRepository(db_path),
        SqliteNotificationRepository(db_path),
        token_manager=TokenManager(
            client, user_repo, buffer_seconds=google.token_refresh_buffer_seconds
        ),
        calendar_id=google.calendar_id,
    )


def get_status_service() -> GoogleCalendarConnectionService:
    """Connection service for read-only use; needs no OAuth client config."""
    config_service = get_config_service()
    google = config_service.google
    client = GoogleCalendarClient(google.client_id, google.client_secret)
    return GoogleCalendarConnectionService(
        client,
        SqliteUserRepository(str(config_service.db_path)),
        redirect_uri=google.redirect_uri,
    )


def parse_callback(value: str) -> tuple[str, str | None]:
    """Split pasted input into ``(code, state)``.

    Accepts either a bare authorization code or the full redirect URL.
    """
    value = value.strip()
    if "://" not in value:
        return value, None
    query = parse_qs(urlparse(value).query)
    code = query.get("code", [""])[0]
    state = query.get("state", [None])[0]
    return code, state


@app.command("connect")
@command_wrapper
async def calendar_connect(
    code: str | None = typer.Option(
        None, "--code", help="Authorization code (skips the interactive prompt)"
    ),
    state: str | None = typer.Option(
        None, "--state", help="OAuth state returned with the code"
    ),
) -> None:
    """Connect a Google Calendar account (browser OAuth flow)."""
    config_service = get_config_service()
    service = get_connection_service()

    if code is None:
        auth_url, state = build_authorization_url(
            config_service.google, config_service.user_id
        )
        console.print("[bold]Open this URL in your browser to authorise Nexus:[/bold]")
        console.print(f"  {auth_url}")
        console.print()
        pasted = typer.prompt("Paste the authorization code or redirect URL")
        code, returned_state = parse_callback(pasted)
        if returned_state is not None and returned_state != state:
            raise ValidationError("State in the redirect URL does not match this request")
    elif state is None:
        # a bare code for our own local user
        state = encode_state(config_service.user_id)

    status = await service.connect(code, state)
    format_success(f"Connected to Google Calendar as {status.email}")


@app.command("disconnect")
@command_wrapper
async def calendar_disconnect() -> None:
    """Disconnect the Google Calendar account and revoke access."""
    service = get_status_service()
    await service.disconnect(get_config_service().user_id)
    format_success("Google Calendar disconnected")


@app.command("status")
@command_wrapper
async def calendar_status(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Show Google Calendar connection status."""
    service = get_status_service()
    status = await service.status(get_config_service().user_id)
    if json_output:
        format_json(status.model_dump(mode="json"))
        return
    format_connection_status(status)


@app.command("sync")
@command_wrapper
async def calendar_sync(
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Import new and changed events from Google Calendar."""
    service = get_sync_service()
    if not json_output:
        format_info("Syncing with Google Calendar…")

    result = await service.sync(get_config_service().user_id)

    if json_output:
        format_json(result.model_dump(mode="json"))
        return

    format_import_summary(result)
    if result.has_conflicts:
        format_warning(
            f"{len(result.conflicts)} event(s) changed both locally and in Google; "
            "local versions were kept."
        )
    format_success(f"{result.imported} events imported")


@app.command("notifications")
@command_wrapper
async def calendar_notifications(
    limit: int = typer.Option(10, "--limit", "-n", min=1, help="Number to show"),
) -> None:
    """Show recent import notifications."""
    config_service = get_config_service()
    repo = SqliteNotificationRepository(str(config_service.db_path))
    notifications = await repo.list_for_user(config_service.user_id, limit=limit)
    format_notifications(notifications)
