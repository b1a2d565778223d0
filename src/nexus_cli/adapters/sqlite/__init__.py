"""SQLite adapter module - local database storage implementation."""

from nexus_cli.adapters.sqlite.connection import (
    DatabaseConnection,
    get_connection,
    open_connection,
)
from nexus_cli.adapters.sqlite.event_repository import SqliteEventRepository
from nexus_cli.adapters.sqlite.notification_repository import (
    SqliteNotificationRepository,
)
from nexus_cli.adapters.sqlite.user_repository import SqliteUserRepository

__all__ = [
    "DatabaseConnection",
    "get_connection",
    "open_connection",
    "SqliteEventRepository",
    "SqliteNotificationRepository",
    "SqliteUserRepository",
]
