"""SQLite implementation of NotificationRepository."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Callable
from datetime import datetime

from nexus_cli.adapters.sqlite.connection import get_connection
from nexus_cli.adapters.sqlite.utils import generate_uuid, now_utc, row_to_dict, to_db_value
from nexus_cli.models import Notification, NotificationCreate
from nexus_cli.repositories import NotificationRepository


class SqliteNotificationRepository(NotificationRepository):
    """Notification records; ``metadata`` is stored as a JSON document."""

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

    async def create(self, notification_data: NotificationCreate) -> Notification:
        notification_id = generate_uuid()
        created_at = self._clock()

        self.connection.execute(
            """INSERT INTO notifications
                   (id, user_id, type, title, message, metadata, created_at)
               VALUES (?, ?, ?, ?, ?, ?, ?)""",
            (
                notification_id,
                notification_data.user_id,
                notification_data.type,
                notification_data.title,
                notification_data.message,
                json.dumps(notification_data.metadata, default=str),
                to_db_value(created_at),
            ),
        )
        self.connection.commit()

        row = self.connection.execute(
            "SELECT * FROM notifications WHERE id = ?", (notification_id,)
        ).fetchone()
        return _to_notification(row)

    async def list_for_user(self, user_id: str, limit: int = 20) -> list[Notification]:
        rows = self.connection.execute(
            """SELECT * FROM notifications WHERE user_id = ?
               ORDER BY created_at DESC, rowid DESC LIMIT ?""",
            (user_id, limit),
        ).fetchall()
        return [_to_notification(row) for row in rows]


def _to_notification(row: sqlite3.Row) -> Notification:
    data = row_to_dict(row)
    data["metadata"] = json.loads(data["metadata"] or "{}")
    return Notification.model_validate(data)
