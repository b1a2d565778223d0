"""Configuration models for Nexus CLI."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, Field, field_validator

GOOGLE_SCOPES = [
    "https://www.googleapis.com/auth/calendar.readonly",
    "https://www.googleapis.com/auth/userinfo.email",
]


class FullSyncWindow(BaseModel):
    """Time window used when no sync cursor is available.

    Defaults to January 1st of last year through December 31st two years
    from now, relative to the clock passed to :meth:`bounds`.
    """

    past_years: int = Field(default=1, ge=0)
    future_years: int = Field(default=2, ge=0)
    time_min: datetime | None = None
    time_max: datetime | None = None

    def bounds(self, now: datetime) -> tuple[datetime, datetime]:
        """Return ``(time_min, time_max)``; explicit bounds win over the defaults."""
        time_min = self.time_min or datetime(now.year - self.past_years, 1, 1, tzinfo=UTC)
        time_max = self.time_max or datetime(
            now.year + self.future_years, 12, 31, 23, 59, 59, tzinfo=UTC
        )
        return time_min, time_max


class GoogleConfig(BaseModel):
    """Google Calendar integration configuration."""

    client_id: str = Field(default="")
    client_secret: str = Field(default="")
    redirect_uri: str = Field(default="http://localhost:3000/oauth/google/callback")
    calendar_id: str = Field(default="primary")
    scopes: list[str] = Field(default_factory=lambda: list(GOOGLE_SCOPES))
    token_refresh_buffer_seconds: int = Field(default=300, ge=0)
    page_size: int = Field(default=250, ge=1, le=2500)
    timeout: float = Field(default=30.0, gt=0)
    sync_window: FullSyncWindow = Field(default_factory=FullSyncWindow)

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


class StorageConfig(BaseModel):
    """Local storage configuration."""

    db_path: str | None = Field(
        default=None, description="SQLite database path (defaults to user data dir)"
    )


class AppConfig(BaseModel):
    """Main Nexus configuration."""

    user_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    google: GoogleConfig = Field(default_factory=GoogleConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("user_id cannot be empty")
        return v.strip()
