"""Configuration management commands."""

import typer

from nexus_cli.errors import ConfigurationError
from nexus_cli.services.config_service import get_config_service
from nexus_cli.utils.ui.formatters import console, format_info, format_json, format_success

from .decorators import command_wrapper

app = typer.Typer(help="Configuration management commands", no_args_is_help=True)

_SECRET_KEYS = {"client_secret"}


def _mask_secrets(data: dict) -> dict:
    masked = {}
    for key, value in data.items():
        if isinstance(value, dict):
            masked[key] = _mask_secrets(value)
        elif key in _SECRET_KEYS and value:
            masked[key] = "****"
        else:
            masked[key] = value
    return masked


@app.command("view")
@command_wrapper
def view_config() -> None:
    """View the current configuration (secrets masked)."""
    config_service = get_config_service()
    format_info(f"Config file: {config_service.config_path}")
    format_json(_mask_secrets(config_service.config.model_dump(mode="json")))


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., google.calendar_id)"),
) -> None:
    """Get a configuration value."""
    value = get_config_service().get(key)
    if value is None:
        raise ConfigurationError(f"Configuration key '{key}' not found")
    console.print(value)


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., google.client_id)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    get_config_service().set(key, value)
    shown = "****" if key.split(".")[-1] in _SECRET_KEYS else value
    format_success(f"Configuration '{key}' set to '{shown}'")


@app.command("reset")
@command_wrapper
def reset_config(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults (the local user id is kept)."""
    if not yes and not typer.confirm("Are you sure you want to reset the configuration?"):
        format_info("Cancelled")
        raise typer.Exit(0)
    get_config_service().reset_config()
    format_success("Configuration reset to defaults")
