"""Decide what a sync run should do with each Google event.

The reconciler never writes. It compares a mapped Google event with the
synced-events index and returns a :class:`ReconcileDecision`; the sync
service carries the decisions out.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum

from nexus_cli.models import EventStatus, EventSyncInfo, ImportConflict

from .models import MappedGoogleEvent


class SyncAction(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    SKIP = "skip"
    CONFLICT = "conflict"


@dataclass(frozen=True)
class ReconcileDecision:
    action: SyncAction
    event: MappedGoogleEvent
    existing: EventSyncInfo | None = None
    conflict: ImportConflict | None = None
    reason: str = ""

    @property
    def expected_version(self) -> int | None:
        return self.existing.version if self.existing else None


class ConflictReconciler:
    """Three-way comparison of Google, the local copy and the last sync.

    Args:
        synced_events: Index of local events that carry Google sync metadata.
    """

    def __init__(self, synced_events: list[EventSyncInfo]) -> None:
        self._by_google_id = {e.google_event_id: e for e in synced_events}

    def lookup(self, google_event_id: str) -> EventSyncInfo | None:
        return self._by_google_id.get(google_event_id)

    def reconcile(self, event: MappedGoogleEvent) -> ReconcileDecision:
        existing = self.lookup(event.google_event_id)

        if existing is None:
            if event.status == EventStatus.CANCELLED:
                return ReconcileDecision(
                    SyncAction.SKIP, event, reason="cancelled_never_imported"
                )
            return ReconcileDecision(SyncAction.CREATE, event, reason="new")

        if existing.google_etag == event.google_etag:
            return ReconcileDecision(
                SyncAction.SKIP, event, existing=existing, reason="unchanged"
            )

        if not has_local_changes(existing):
            return ReconcileDecision(
                SyncAction.UPDATE, event, existing=existing, reason="remote_changed"
            )

        # Both sides moved, or Google's timestamp cannot prove it did not:
        # keep the local copy and surface the conflict.
        return ReconcileDecision(
            SyncAction.CONFLICT,
            event,
            existing=existing,
            conflict=conflict_for(existing, event),
            reason=(
                "both_changed"
                if _is_after(event.google_updated_at, existing.google_synced_at)
                else "ambiguous"
            ),
        )


def has_local_changes(existing: EventSyncInfo) -> bool:
    """True if the local event was updated after it was last synced."""
    if existing.google_synced_at is None:
        return True
    return _aware(existing.updated_at) > _aware(existing.google_synced_at)


def conflict_for(existing: EventSyncInfo, event: MappedGoogleEvent) -> ImportConflict:
    return ImportConflict(
        event_id=existing.event_id,
        title=event.title,
        local_updated_at=existing.updated_at,
        google_updated_at=event.google_updated_at,
    )


def _is_after(value: datetime | None, reference: datetime | None) -> bool:
    if value is None or reference is None:
        return False
    return _aware(value) > _aware(reference)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
