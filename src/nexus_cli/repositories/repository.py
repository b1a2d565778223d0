"""Repository abstraction layer for Nexus CLI.

This module defines the abstract base classes (interfaces) for the storage
collaborators of the sync engine, following the hexagonal architecture
(Ports & Adapters) pattern. Implementations live in
``nexus_cli.adapters.sqlite``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from nexus_cli.models import (
    CalendarEvent,
    EventCreate,
    EventSyncInfo,
    EventUpdate,
    GoogleCalendarSyncState,
    GoogleOAuthTokens,
    Notification,
    NotificationCreate,
    UserMeta,
)


class UserRepository(ABC):
    """Stores per-user Google credentials and the sync cursor."""

    @abstractmethod
    async def find_meta(self, user_id: str) -> UserMeta | None:
        """Get user metadata including OAuth tokens and sync state.

        Returns:
            UserMeta, or None if nothing is stored for the user
        """
        raise NotImplementedError(
            "UserRepository.find_meta() must be implemented by adapter"
        )

    @abstractmethod
    async def save_google_oauth(self, user_id: str, tokens: GoogleOAuthTokens) -> None:
        """Save Google OAuth tokens, replacing any existing ones."""
        raise NotImplementedError(
            "UserRepository.save_google_oauth() must be implemented by adapter"
        )

    @abstractmethod
    async def update_access_token(
        self, user_id: str, access_token: str, expires_at: datetime
    ) -> None:
        """Update only the access token and its expiry."""
        raise NotImplementedError(
            "UserRepository.update_access_token() must be implemented by adapter"
        )

    @abstractmethod
    async def update_sync_state(
        self, user_id: str, sync_state: GoogleCalendarSyncState
    ) -> None:
        """Replace the stored sync cursor and last-sync timestamp."""
        raise NotImplementedError(
            "UserRepository.update_sync_state() must be implemented by adapter"
        )

    @abstractmethod
    async def remove_google_oauth(self, user_id: str) -> None:
        """Remove Google OAuth data and sync state (disconnect)."""
        raise NotImplementedError(
            "UserRepository.remove_google_oauth() must be implemented by adapter"
        )


class EventRepository(ABC):
    """Calendar event persistence with optimistic locking."""

    @abstractmethod
    async def create(self, event_data: EventCreate) -> CalendarEvent:
        """Create a new event.

        Returns:
            Created CalendarEvent with generated ID, version 1 and timestamps
        """
        raise NotImplementedError(
            "EventRepository.create() must be implemented by adapter"
        )

    @abstractmethod
    async def get(self, user_id: str, event_id: str) -> CalendarEvent:
        """Get a specific event by ID.

        Raises:
            EventNotFoundError: If the event does not exist
        """
        raise NotImplementedError("EventRepository.get() must be implemented by adapter")

    @abstractmethod
    async def update(
        self,
        user_id: str,
        event_id: str,
        updates: EventUpdate,
        expected_version: int,
    ) -> CalendarEvent:
        """Update an existing event if its version still matches.

        Args:
            user_id: Owner of the event
            event_id: Unique identifier for the event
            updates: Fields to change (only explicitly set fields are written)
            expected_version: Version the caller read; the write fails if the
                stored version differs

        Returns:
            Updated CalendarEvent with version incremented

        Raises:
            EventNotFoundError: If the event does not exist
            VersionConflictError: If the stored version differs
        """
        raise NotImplementedError(
            "EventRepository.update() must be implemented by adapter"
        )

    @abstractmethod
    async def find_google_synced_events(self, user_id: str) -> list[EventSyncInfo]:
        """List every event carrying Google sync metadata for the user."""
        raise NotImplementedError(
            "EventRepository.find_google_synced_events() must be implemented by adapter"
        )


class NotificationRepository(ABC):
    """User-visible notification records."""

    @abstractmethod
    async def create(self, notification_data: NotificationCreate) -> Notification:
        raise NotImplementedError(
            "NotificationRepository.create() must be implemented by adapter"
        )

    @abstractmethod
    async def list_for_user(self, user_id: str, limit: int = 20) -> list[Notification]:
        """Most recent notifications first."""
        raise NotImplementedError(
            "NotificationRepository.list_for_user() must be implemented by adapter"
        )
