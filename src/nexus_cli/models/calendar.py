"""Calendar event data models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

DEFAULT_EVENT_COLOR = "#3B82F6"
GOOGLE_EVENT_COLOR = "#4285F4"


class EventStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    TENTATIVE = "TENTATIVE"
    CANCELLED = "CANCELLED"


class RecurType(str, Enum):
    MASTER = "MASTER"
    INSTANCE = "INSTANCE"


class CalendarEvent(BaseModel):
    """Calendar event stored locally.

    Attributes:
        id: Unique identifier for the event
        user_id: Owner of the event
        title: Event title
        description: Optional free-form description
        is_all_day: Whether the event spans whole days
        start_utc: Start instant in UTC (midnight UTC for all-day events)
        end_utc: End instant in UTC
        start_tzid: Time-zone label the start was expressed in, if any
        end_tzid: Time-zone label the end was expressed in, if any
        location: Optional location
        color: Hex display color
        status: Lifecycle status
        rrule: Recurrence rule without the ``RRULE:`` prefix (masters only)
        recur_type: MASTER or INSTANCE for recurring events
        master_event_id: Series the instance belongs to (instances only)
        original_start_utc: Occurrence the instance overrides (instances only)
        google_event_id: Google event id when imported from Google Calendar
        google_calendar_id: Google calendar the event was imported from
        google_etag: Google change tag seen at the last sync
        google_synced_at: Time of the last sync that wrote this event
        version: Optimistic concurrency counter, incremented on every update
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    id: str
    user_id: str
    title: str
    description: str | None = None
    is_all_day: bool = False
    start_utc: datetime
    end_utc: datetime
    start_tzid: str | None = None
    end_tzid: str | None = None
    location: str | None = None
    color: str = DEFAULT_EVENT_COLOR
    status: EventStatus = EventStatus.CONFIRMED
    rrule: str | None = None
    recur_type: RecurType | None = None
    master_event_id: str | None = None
    original_start_utc: datetime | None = None
    google_event_id: str | None = None
    google_calendar_id: str | None = None
    google_etag: str | None = None
    google_synced_at: datetime | None = None
    version: int = 1
    created_at: datetime
    updated_at: datetime


class EventCreate(BaseModel):
    """Model for creating a new event.

    When ``google_synced_at`` is set the event is written by a sync run and
    its ``updated_at`` is stamped with the same instant, so a freshly imported
    event never looks locally modified.
    """

    user_id: str
    title: str
    description: str | None = None
    is_all_day: bool = False
    start_utc: datetime
    end_utc: datetime
    start_tzid: str | None = None
    end_tzid: str | None = None
    location: str | None = None
    color: str = DEFAULT_EVENT_COLOR
    status: EventStatus = EventStatus.CONFIRMED
    rrule: str | None = None
    recur_type: RecurType | None = None
    master_event_id: str | None = None
    original_start_utc: datetime | None = None
    google_event_id: str | None = None
    google_calendar_id: str | None = None
    google_etag: str | None = None
    google_synced_at: datetime | None = None


class EventUpdate(BaseModel):
    """Model for updating an existing event.

    All fields are optional - only fields that were explicitly set are written.
    """

    title: str | None = None
    description: str | None = None
    is_all_day: bool | None = None
    start_utc: datetime | None = None
    end_utc: datetime | None = None
    start_tzid: str | None = None
    end_tzid: str | None = None
    location: str | None = None
    color: str | None = None
    status: EventStatus | None = None
    rrule: str | None = None
    recur_type: RecurType | None = None
    master_event_id: str | None = None
    original_start_utc: datetime | None = None
    google_etag: str | None = None
    google_synced_at: datetime | None = None


class EventSyncInfo(BaseModel):
    """Minimal view of a Google-synced event used for conflict detection."""

    event_id: str
    google_event_id: str
    google_etag: str | None = None
    google_synced_at: datetime | None = None
    updated_at: datetime
    version: int
    title: str = ""


class ImportConflict(BaseModel):
    """An event changed both locally and in Google since the last sync."""

    event_id: str
    title: str
    local_updated_at: datetime
    google_updated_at: datetime | None = None


class GoogleImportResult(BaseModel):
    """Summary of one completed sync run."""

    imported: int = 0
    skipped: int = 0
    conflicts: list[ImportConflict] = Field(default_factory=list)
    notification_id: str | None = None
    full_sync: bool = False

    @property
    def has_conflicts(self) -> bool:
        return len(self.conflicts) > 0
