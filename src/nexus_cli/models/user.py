"""User metadata models: stored Google credentials and sync cursor."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class GoogleOAuthTokens(BaseModel):
    """Stored OAuth credentials for Google Calendar access.

    A credential without a refresh token cannot be renewed once the access
    token expires; the user has to reconnect.
    """

    access_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None
    email: str = ""
    connected_at: datetime | None = None

    @property
    def is_renewable(self) -> bool:
        return bool(self.refresh_token and self.refresh_token.strip())


class GoogleCalendarSyncState(BaseModel):
    """Cursor left behind by the last successful sync."""

    sync_token: str | None = None
    last_sync_at: datetime | None = None


class UserMeta(BaseModel):
    user_id: str
    google_oauth: GoogleOAuthTokens | None = None
    google_calendar_sync: GoogleCalendarSyncState | None = None
    updated_at: datetime | None = None


class GoogleConnectionStatus(BaseModel):
    connected: bool
    email: str | None = None
    connected_at: datetime | None = None
    last_sync_at: datetime | None = None
