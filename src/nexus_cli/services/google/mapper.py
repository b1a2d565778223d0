"""Translate Google Calendar events into the local calendar model.

Pure functions only: no I/O and no failure states. Where no rule applies the
input is carried through unchanged.
"""

from __future__ import annotations

from datetime import UTC, date, datetime, time, timedelta

from nexus_cli.models import EventStatus, RecurType

from .models import EventDateTime, GoogleCalendarEvent, MappedGoogleEvent

NO_TITLE = "(No title)"

_STATUS_MAP = {
    "confirmed": EventStatus.CONFIRMED,
    "tentative": EventStatus.TENTATIVE,
    "cancelled": EventStatus.CANCELLED,
}


def map_google_event(
    event: GoogleCalendarEvent,
    *,
    synced_at: datetime,
    calendar_id: str = "primary",
) -> MappedGoogleEvent:
    """Map one Google event onto the local event shape.

    Args:
        event: Event as returned by the events-list endpoint.
        synced_at: Timestamp of the current sync run.
        calendar_id: Google calendar the event came from.
    """
    is_all_day = event.start is not None and event.start.is_date_only

    if is_all_day:
        start_utc = midnight_utc(event.start.date)
        if event.end is not None and event.end.date is not None:
            end_utc = midnight_utc(event.end.date)
        else:
            end_utc = start_utc + timedelta(days=1)
    else:
        start_utc = _instant(event.start)
        end_utc = _instant(event.end)

    mapped = MappedGoogleEvent(
        title=event.summary or NO_TITLE,
        description=event.description or None,
        is_all_day=is_all_day,
        start_utc=start_utc,
        end_utc=end_utc,
        start_tzid=event.start.time_zone if event.start else None,
        end_tzid=event.end.time_zone if event.end else None,
        location=event.location or None,
        status=map_status(event.status),
        google_event_id=event.id,
        google_calendar_id=calendar_id,
        google_etag=event.etag,
        google_synced_at=synced_at,
        google_updated_at=event.updated,
    )

    # An occurrence of a series is never itself a series master.
    if event.recurring_event_id:
        mapped.recur_type = RecurType.INSTANCE
        mapped.master_event_id = event.recurring_event_id
        if event.original_start_time is not None:
            if event.original_start_time.is_date_only:
                mapped.original_start_utc = midnight_utc(event.original_start_time.date)
            else:
                mapped.original_start_utc = _instant(event.original_start_time)
    elif event.recurrence:
        rrule = extract_rrule(event.recurrence)
        if rrule:
            mapped.rrule = rrule
            mapped.recur_type = RecurType.MASTER

    return mapped


def map_status(status: str | None) -> EventStatus:
    """Upper-case Google's lifecycle status onto :class:`EventStatus`."""
    if not status:
        return EventStatus.CONFIRMED
    return _STATUS_MAP.get(status.strip().lower(), EventStatus.CONFIRMED)


def extract_rrule(recurrence: list[str]) -> str | None:
    """Return the first recurrence rule with its ``RRULE:`` prefix removed.

    Google sends RFC 5545 property lines (``RRULE:``, ``EXDATE:``, ...). A
    line without any property prefix is taken as a bare rule.
    """
    for line in recurrence:
        stripped = line.strip()
        if stripped.upper().startswith("RRULE:"):
            return stripped[len("RRULE:"):]
        if stripped and ":" not in stripped:
            return stripped
    return None


def midnight_utc(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=UTC)


def _instant(value: EventDateTime | None) -> datetime | None:
    if value is None or value.date_time is None:
        return None
    dt = value.date_time
    if dt.tzinfo is None:
        # Floating times are interpreted as UTC; the tz label is kept separately.
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)
