"""SQLite implementation of EventRepository with optimistic locking."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from datetime import datetime

from nexus_cli.adapters.sqlite.connection import get_connection
from nexus_cli.adapters.sqlite.utils import (
    build_set_clause,
    generate_uuid,
    now_utc,
    row_to_dict,
    to_db_value,
)
from nexus_cli.errors import EventNotFoundError, VersionConflictError
from nexus_cli.models import CalendarEvent, EventCreate, EventSyncInfo, EventUpdate
from nexus_cli.repositories import EventRepository


class SqliteEventRepository(EventRepository):
    """Events table access.

    Writes that carry ``google_synced_at`` stamp ``updated_at`` with the same
    instant, so only edits made outside a sync run count as local changes.

    Args:
        db_path: Optional database file path. If None, uses default location.
        connection: Already-open connection (takes precedence over *db_path*).
        clock: Returns the current time for local writes.
    """

    def __init__(
        self,
        db_path: str | None = None,
        *,
        connection: sqlite3.Connection | None = None,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.db_path = db_path
        self._connection = connection
        self._clock = clock

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            self._connection = get_connection(self.db_path)
        return self._connection

    async def create(self, event_data: EventCreate) -> CalendarEvent:
        event_id = generate_uuid()
        now = self._clock()

        data = event_data.model_dump()
        data.update(
            id=event_id,
            version=1,
            created_at=now,
            updated_at=event_data.google_synced_at or now,
        )

        columns = ", ".join(data)
        placeholders = ", ".join("?" for _ in data)
        self.connection.execute(
            f"INSERT INTO events ({columns}) VALUES ({placeholders})",
            [to_db_value(v) for v in data.values()],
        )
        self.connection.commit()

        return await self.get(event_data.user_id, event_id)

    async def get(self, user_id: str, event_id: str) -> CalendarEvent:
        row = self.connection.execute(
            "SELECT * FROM events WHERE id = ? AND user_id = ?", (event_id, user_id)
        ).fetchone()
        if row is None:
            raise EventNotFoundError(event_id)
        return CalendarEvent.model_validate(row_to_dict(row))

    async def update(
        self,
        user_id: str,
        event_id: str,
        updates: EventUpdate,
        expected_version: int,
    ) -> CalendarEvent:
        current = await self.get(user_id, event_id)
        if current.version != expected_version:
            raise VersionConflictError(event_id, expected_version)

        changes = updates.model_dump(exclude_unset=True)
        changes["updated_at"] = changes.get("google_synced_at") or self._clock()
        set_clause, params = build_set_clause(changes)

        cursor = self.connection.execute(
            f"UPDATE events SET {set_clause}, version = version + 1 "
            "WHERE id = ? AND user_id = ? AND version = ?",
            [*params, event_id, user_id, expected_version],
        )
        self.connection.commit()

        # another writer got in between the read and the write
        if cursor.rowcount == 0:
            raise VersionConflictError(event_id, expected_version)

        return await self.get(user_id, event_id)

    async def find_google_synced_events(self, user_id: str) -> list[EventSyncInfo]:
        rows = self.connection.execute(
            """SELECT id AS event_id, google_event_id, google_etag, google_synced_at,
                      updated_at, version, title
               FROM events
               WHERE user_id = ? AND google_event_id IS NOT NULL""",
            (user_id,),
        ).fetchall()
        return [EventSyncInfo.model_validate(row_to_dict(row)) for row in rows]
