"""Pydantic models for Google Calendar / OAuth API responses."""

from __future__ import annotations

from datetime import date as date_type
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from nexus_cli.models import EventCreate, EventStatus, EventUpdate, RecurType
from nexus_cli.models.calendar import GOOGLE_EVENT_COLOR


class _GoogleModel(BaseModel):
    """Accepts Google's camelCase payloads and ignores fields we do not use."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class EventDateTime(_GoogleModel):
    """Start/end of a Google event: either ``date`` (all-day) or ``dateTime``."""

    date: date_type | None = None
    date_time: datetime | None = Field(default=None, alias="dateTime")
    time_zone: str | None = Field(default=None, alias="timeZone")

    @property
    def is_date_only(self) -> bool:
        return self.date_time is None and self.date is not None


class GoogleCalendarEvent(_GoogleModel):
    """A Google Calendar event as returned by the events-list endpoint.

    Cancelled events returned by incremental syncs may carry only ``id``,
    ``etag`` and ``status``, so everything else is optional.
    """

    id: str
    etag: str = ""
    status: str = "confirmed"
    summary: str | None = None
    description: str | None = None
    location: str | None = None
    start: EventDateTime | None = None
    end: EventDateTime | None = None
    recurrence: list[str] | None = None
    recurring_event_id: str | None = Field(default=None, alias="recurringEventId")
    original_start_time: EventDateTime | None = Field(
        default=None, alias="originalStartTime"
    )
    updated: datetime | None = None
    created: datetime | None = None


class FetchEventsResult(BaseModel):
    events: list[GoogleCalendarEvent] = Field(default_factory=list)
    next_sync_token: str | None = None
    full_sync: bool = False
    # items Google sent that could not be parsed; the cursor still moves past them
    malformed: int = 0


class TokenRefreshResult(BaseModel):
    access_token: str
    expires_at: datetime


class TokenExchangeResult(BaseModel):
    access_token: str
    refresh_token: str | None = None
    expires_at: datetime


class GoogleUserInfo(_GoogleModel):
    email: str
    verified_email: bool = False


class MappedGoogleEvent(BaseModel):
    """A Google event translated into the local event shape.

    ``start_utc``/``end_utc`` stay ``None`` when Google sent no start/end
    (e.g. cancelled tombstones from an incremental sync).
    """

    title: str
    description: str | None = None
    is_all_day: bool = False
    start_utc: datetime | None = None
    end_utc: datetime | None = None
    start_tzid: str | None = None
    end_tzid: str | None = None
    location: str | None = None
    status: EventStatus = EventStatus.CONFIRMED
    rrule: str | None = None
    recur_type: RecurType | None = None
    master_event_id: str | None = None
    original_start_utc: datetime | None = None
    google_event_id: str
    google_calendar_id: str = "primary"
    google_etag: str
    google_synced_at: datetime
    google_updated_at: datetime | None = None

    def to_create(self, user_id: str) -> EventCreate:
        """Payload for creating a new local event from this Google event."""
        return EventCreate(
            user_id=user_id,
            title=self.title,
            description=self.description,
            is_all_day=self.is_all_day,
            start_utc=self.start_utc,
            end_utc=self.end_utc,
            start_tzid=self.start_tzid,
            end_tzid=self.end_tzid,
            location=self.location,
            color=GOOGLE_EVENT_COLOR,
            status=self.status,
            rrule=self.rrule,
            recur_type=self.recur_type,
            master_event_id=self.master_event_id,
            original_start_utc=self.original_start_utc,
            google_event_id=self.google_event_id,
            google_calendar_id=self.google_calendar_id,
            google_etag=self.google_etag,
            google_synced_at=self.google_synced_at,
        )

    @property
    def is_tombstone(self) -> bool:
        """A deleted event as sent by an incremental sync: no times, nothing else."""
        return self.status is EventStatus.CANCELLED and self.start_utc is None

    def to_update(self) -> EventUpdate:
        """Patch applying the Google side onto an existing local event.

        A tombstone only marks the local copy cancelled; its content and
        times stay as they were last imported.
        """
        if self.is_tombstone:
            return EventUpdate(
                status=self.status,
                google_etag=self.google_etag,
                google_synced_at=self.google_synced_at,
            )

        fields: dict[str, object] = {
            "title": self.title,
            "description": self.description,
            "is_all_day": self.is_all_day,
            "start_tzid": self.start_tzid,
            "end_tzid": self.end_tzid,
            "location": self.location,
            "status": self.status,
            "rrule": self.rrule,
            "recur_type": self.recur_type,
            "master_event_id": self.master_event_id,
            "original_start_utc": self.original_start_utc,
            "google_etag": self.google_etag,
            "google_synced_at": self.google_synced_at,
        }
        if self.start_utc is not None:
            fields["start_utc"] = self.start_utc
        if self.end_utc is not None:
            fields["end_utc"] = self.end_utc
        return EventUpdate(**fields)
