"""Typed application errors.

Every failure kind the sync engine can surface has its own class with a
stable machine-readable ``code`` and a human-readable message. Upstream
response bodies are logged where they occur and never copied into these
messages.
"""

from __future__ import annotations

from typing import Any

from nexus_cli.utils import exit_codes


class NexusError(Exception):
    """Base class for all Nexus errors."""

    code: str = "INTERNAL_ERROR"
    exit_code: int = exit_codes.ERROR_GENERAL

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationError(NexusError):
    code = "VALIDATION_ERROR"
    exit_code = exit_codes.ERROR_INVALID_ARGS


class ConfigurationError(NexusError):
    code = "CONFIGURATION_ERROR"
    exit_code = exit_codes.ERROR_INVALID_ARGS


class EventNotFoundError(NexusError):
    code = "EVENT_NOT_FOUND"
    exit_code = exit_codes.ERROR_NOT_FOUND

    def __init__(self, event_id: str):
        super().__init__(f"Event with id '{event_id}' not found")
        self.event_id = event_id


class VersionConflictError(NexusError):
    """Raised by the event store when the expected version does not match."""

    code = "VERSION_CONFLICT"
    exit_code = exit_codes.ERROR_CONFLICT

    def __init__(self, event_id: str, expected_version: int):
        super().__init__(
            f"Event '{event_id}' was modified concurrently "
            f"(expected version {expected_version})"
        )
        self.event_id = event_id
        self.expected_version = expected_version


class NotConnectedError(NexusError):
    code = "NOT_CONNECTED"
    exit_code = exit_codes.ERROR_AUTH_FAILURE

    def __init__(self, service: str = "Google Calendar"):
        super().__init__(f"{service} is not connected")


class ReauthRequiredError(NexusError):
    """Access token expired and there is no refresh token to renew it."""

    code = "REAUTH_REQUIRED"
    exit_code = exit_codes.ERROR_AUTH_FAILURE

    def __init__(self, service: str = "Google Calendar"):
        super().__init__(f"Please reconnect your {service}")


class GoogleOAuthError(NexusError):
    """Base class for failures talking to Google."""

    code = "GOOGLE_OAUTH_ERROR"
    exit_code = exit_codes.ERROR_NETWORK


class TokenRefreshError(GoogleOAuthError):
    code = "TOKEN_REFRESH_FAILED"

    def __init__(self, message: str = "Failed to refresh access token"):
        super().__init__(message)


class SyncTokenInvalidError(GoogleOAuthError):
    code = "SYNC_TOKEN_INVALID"

    def __init__(self, message: str = "Sync token is invalid, full sync required"):
        super().__init__(message)


class GoogleApiError(GoogleOAuthError):
    """Provider returned a non-success status (0 when no response was received)."""

    code = "GOOGLE_API_ERROR"

    def __init__(self, status: int, message: str = "Google Calendar API error"):
        super().__init__(message)
        self.status = status

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "status": self.status}
