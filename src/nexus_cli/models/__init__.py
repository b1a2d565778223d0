"""Nexus CLI domain models.

Pydantic models for calendar events, stored Google credentials, sync state,
notifications and configuration.
"""

from .calendar import (
    CalendarEvent,
    EventCreate,
    EventStatus,
    EventSyncInfo,
    EventUpdate,
    GoogleImportResult,
    ImportConflict,
    RecurType,
)
from .config_models import AppConfig, FullSyncWindow, GoogleConfig, StorageConfig
from .notification import Notification, NotificationCreate
from .user import (
    GoogleCalendarSyncState,
    GoogleConnectionStatus,
    GoogleOAuthTokens,
    UserMeta,
)

__all__ = [
    # Event models
    "CalendarEvent",
    "EventCreate",
    "EventUpdate",
    "EventStatus",
    "EventSyncInfo",
    "RecurType",
    # Sync results
    "GoogleImportResult",
    "ImportConflict",
    # User meta
    "GoogleOAuthTokens",
    "GoogleCalendarSyncState",
    "GoogleConnectionStatus",
    "UserMeta",
    # Notifications
    "Notification",
    "NotificationCreate",
    # Config models
    "AppConfig",
    "FullSyncWindow",
    "GoogleConfig",
    "StorageConfig",
]
