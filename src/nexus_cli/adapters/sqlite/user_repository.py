"""SQLite implementation of UserRepository."""

from __future__ import annotations

import sqlite3
from collections.abc import Callable
from datetime import datetime

from nexus_cli.adapters.sqlite.connection import get_connection
from nexus_cli.adapters.sqlite.utils import (
    now_utc,
    parse_datetime,
    row_to_dict,
    to_db_value,
)
from nexus_cli.models import GoogleCalendarSyncState, GoogleOAuthTokens, UserMeta
from nexus_cli.repositories import UserRepository

_GOOGLE_COLUMNS = (
    "google_access_token",
    "google_refresh_token",
    "google_expires_at",
    "google_email",
    "google_connected_at",
    "google_sync_token",
    "google_last_sync_at",
)


class SqliteUserRepository(UserRepository):
    """Stores Google credentials and the sync cursor in ``user_meta``.

    Args:
        db_path: Optional database file path. If None, uses default location.
        connection: Already-open connection (takes precedence over *db_path*).
        clock: Returns the current time for ``updated_at``.
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

    async def find_meta(self, user_id: str) -> UserMeta | None:
        row = self.connection.execute(
            "SELECT * FROM user_meta WHERE user_id = ?", (user_id,)
        ).fetchone()
        if row is None:
            return None

        data = row_to_dict(row)
        google_oauth = None
        if data["google_access_token"] is not None:
            google_oauth = GoogleOAuthTokens(
                access_token=data["google_access_token"],
                refresh_token=data["google_refresh_token"],
                expires_at=parse_datetime(data["google_expires_at"]),
                email=data["google_email"] or "",
                connected_at=parse_datetime(data["google_connected_at"]),
            )

        sync_state = None
        if data["google_sync_token"] is not None or data["google_last_sync_at"] is not None:
            sync_state = GoogleCalendarSyncState(
                sync_token=data["google_sync_token"],
                last_sync_at=parse_datetime(data["google_last_sync_at"]),
            )

        return UserMeta(
            user_id=user_id,
            google_oauth=google_oauth,
            google_calendar_sync=sync_state,
            updated_at=parse_datetime(data["updated_at"]),
        )

    async def save_google_oauth(self, user_id: str, tokens: GoogleOAuthTokens) -> None:
        self._upsert(
            user_id,
            {
                "google_access_token": tokens.access_token,
                "google_refresh_token": tokens.refresh_token,
                "google_expires_at": tokens.expires_at,
                "google_email": tokens.email,
                "google_connected_at": tokens.connected_at,
            },
        )

    async def update_access_token(
        self, user_id: str, access_token: str, expires_at: datetime
    ) -> None:
        self.connection.execute(
            """UPDATE user_meta
               SET google_access_token = ?, google_expires_at = ?, updated_at = ?
               WHERE user_id = ?""",
            (access_token, to_db_value(expires_at), to_db_value(self._clock()), user_id),
        )
        self.connection.commit()

    async def update_sync_state(
        self, user_id: str, sync_state: GoogleCalendarSyncState
    ) -> None:
        self._upsert(
            user_id,
            {
                "google_sync_token": sync_state.sync_token,
                "google_last_sync_at": sync_state.last_sync_at,
            },
        )

    async def remove_google_oauth(self, user_id: str) -> None:
        self._upsert(user_id, dict.fromkeys(_GOOGLE_COLUMNS))

    def _upsert(self, user_id: str, values: dict[str, object]) -> None:
        values = {**values, "updated_at": self._clock()}
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        assignments = ", ".join(f"{col} = excluded.{col}" for col in values)
        self.connection.execute(
            f"INSERT INTO user_meta (user_id, {columns}) VALUES (?, {placeholders}) "
            f"ON CONFLICT(user_id) DO UPDATE SET {assignments}",
            (user_id, *(to_db_value(v) for v in values.values())),
        )
        self.connection.commit()
