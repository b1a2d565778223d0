"""Unit tests for the SQLite user, event and notification repositories.

Every test runs against a fresh, fully migrated in-memory database (see the
``db`` fixture in conftest), so the real SQL is exercised.
"""

from __future__ import annotations

import sqlite3
from datetime import UTC, datetime, timedelta

import pytest

from nexus_cli.adapters.sqlite import SqliteEventRepository
from nexus_cli.errors import EventNotFoundError, VersionConflictError
from nexus_cli.models import (
    EventCreate,
    EventStatus,
    EventUpdate,
    GoogleCalendarSyncState,
    GoogleOAuthTokens,
    NotificationCreate,
    RecurType,
)

NOW = datetime(2025, 11, 26, 10, 0, tzinfo=UTC)
USER_ID = "user-123"
SYNCED_AT = NOW - timedelta(days=1)


def _tokens(**overrides) -> GoogleOAuthTokens:
    data = {
        "access_token": "at",
        "refresh_token": "rt",
        "expires_at": NOW + timedelta(hours=1),
        "email": "me@example.com",
        "connected_at": NOW - timedelta(days=7),
    }
    data.update(overrides)
    return GoogleOAuthTokens(**data)


def _event(**overrides) -> EventCreate:
    data = {
        "user_id": USER_ID,
        "title": "Standup",
        "start_utc": datetime(2025, 12, 1, 9, tzinfo=UTC),
        "end_utc": datetime(2025, 12, 1, 9, 15, tzinfo=UTC),
    }
    data.update(overrides)
    return EventCreate(**data)


# ---------------------------------------------------------------------------
# SqliteUserRepository
# ---------------------------------------------------------------------------


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_unknown_user_has_no_meta(self, user_repo):
        assert await user_repo.find_meta(USER_ID) is None

    @pytest.mark.asyncio
    async def test_save_and_read_tokens(self, user_repo):
        await user_repo.save_google_oauth(USER_ID, _tokens())

        meta = await user_repo.find_meta(USER_ID)
        assert meta.google_oauth == _tokens()
        assert meta.google_calendar_sync is None
        assert meta.updated_at == NOW

    @pytest.mark.asyncio
    async def test_saving_again_replaces_tokens_but_keeps_cursor(self, user_repo):
        await user_repo.save_google_oauth(USER_ID, _tokens())
        await user_repo.update_sync_state(
            USER_ID, GoogleCalendarSyncState(sync_token="c1", last_sync_at=SYNCED_AT)
        )
        await user_repo.save_google_oauth(USER_ID, _tokens(access_token="at2", refresh_token=None))

        meta = await user_repo.find_meta(USER_ID)
        assert meta.google_oauth.access_token == "at2"
        assert meta.google_oauth.refresh_token is None
        assert meta.google_calendar_sync.sync_token == "c1"

    @pytest.mark.asyncio
    async def test_update_access_token_only_touches_token_and_expiry(self, user_repo):
        await user_repo.save_google_oauth(USER_ID, _tokens())
        new_expiry = NOW + timedelta(hours=2)

        await user_repo.update_access_token(USER_ID, "fresh", new_expiry)

        tokens = (await user_repo.find_meta(USER_ID)).google_oauth
        assert tokens.access_token == "fresh"
        assert tokens.expires_at == new_expiry
        assert tokens.refresh_token == "rt"
        assert tokens.email == "me@example.com"

    @pytest.mark.asyncio
    async def test_sync_state_without_credentials(self, user_repo):
        await user_repo.update_sync_state(
            USER_ID, GoogleCalendarSyncState(sync_token=None, last_sync_at=SYNCED_AT)
        )
        meta = await user_repo.find_meta(USER_ID)
        assert meta.google_oauth is None
        assert meta.google_calendar_sync.sync_token is None
        assert meta.google_calendar_sync.last_sync_at == SYNCED_AT

    @pytest.mark.asyncio
    async def test_remove_clears_tokens_and_cursor(self, user_repo):
        await user_repo.save_google_oauth(USER_ID, _tokens())
        await user_repo.update_sync_state(
            USER_ID, GoogleCalendarSyncState(sync_token="c1", last_sync_at=SYNCED_AT)
        )

        await user_repo.remove_google_oauth(USER_ID)

        meta = await user_repo.find_meta(USER_ID)
        assert meta is not None
        assert meta.google_oauth is None
        assert meta.google_calendar_sync is None

    @pytest.mark.asyncio
    async def test_users_are_isolated(self, user_repo):
        await user_repo.save_google_oauth(USER_ID, _tokens())
        assert await user_repo.find_meta("someone-else") is None


# ---------------------------------------------------------------------------
# SqliteEventRepository
# ---------------------------------------------------------------------------


class TestEventRepository:
    @pytest.mark.asyncio
    async def test_create_assigns_id_version_and_timestamps(self, event_repo):
        event = await event_repo.create(_event(description="Daily"))

        assert event.id
        assert event.version == 1
        assert event.created_at == NOW
        assert event.updated_at == NOW
        assert event.description == "Daily"
        assert event.status == EventStatus.CONFIRMED

    @pytest.mark.asyncio
    async def test_synced_create_stamps_updated_at_with_sync_time(self, event_repo):
        event = await event_repo.create(
            _event(google_event_id="g1", google_etag='"e1"', google_synced_at=SYNCED_AT)
        )
        assert event.created_at == NOW
        assert event.updated_at == SYNCED_AT

    @pytest.mark.asyncio
    async def test_round_trips_recurrence_and_all_day(self, event_repo):
        event = await event_repo.create(
            _event(
                is_all_day=True,
                rrule="FREQ=WEEKLY",
                recur_type=RecurType.MASTER,
                start_tzid="Europe/Paris",
            )
        )
        fetched = await event_repo.get(USER_ID, event.id)
        assert fetched.is_all_day is True
        assert fetched.rrule == "FREQ=WEEKLY"
        assert fetched.recur_type == RecurType.MASTER
        assert fetched.start_tzid == "Europe/Paris"

    @pytest.mark.asyncio
    async def test_get_unknown_event_raises(self, event_repo):
        with pytest.raises(EventNotFoundError):
            await event_repo.get(USER_ID, "missing")

    @pytest.mark.asyncio
    async def test_get_is_scoped_to_user(self, event_repo):
        event = await event_repo.create(_event())
        with pytest.raises(EventNotFoundError):
            await event_repo.get("other-user", event.id)

    @pytest.mark.asyncio
    async def test_update_bumps_version(self, event_repo):
        event = await event_repo.create(_event())

        updated = await event_repo.update(
            USER_ID, event.id, EventUpdate(title="Renamed"), expected_version=1
        )

        assert updated.title == "Renamed"
        assert updated.version == 2
        assert updated.updated_at == NOW
        assert updated.description is None

    @pytest.mark.asyncio
    async def test_synced_update_stamps_updated_at_with_sync_time(self, event_repo):
        event = await event_repo.create(_event(google_event_id="g1"))

        updated = await event_repo.update(
            USER_ID,
            event.id,
            EventUpdate(status=EventStatus.CANCELLED, google_etag='"e2"', google_synced_at=SYNCED_AT),
            expected_version=1,
        )

        assert updated.status == EventStatus.CANCELLED
        assert updated.google_etag == '"e2"'
        assert updated.updated_at == SYNCED_AT

    @pytest.mark.asyncio
    async def test_stale_version_is_rejected_without_writing(self, event_repo):
        event = await event_repo.create(_event())
        await event_repo.update(USER_ID, event.id, EventUpdate(title="First"), 1)

        with pytest.raises(VersionConflictError) as exc_info:
            await event_repo.update(USER_ID, event.id, EventUpdate(title="Second"), 1)

        assert exc_info.value.expected_version == 1
        current = await event_repo.get(USER_ID, event.id)
        assert current.title == "First"
        assert current.version == 2

    @pytest.mark.asyncio
    async def test_update_missing_event_raises_not_found(self, event_repo):
        with pytest.raises(EventNotFoundError):
            await event_repo.update(USER_ID, "missing", EventUpdate(title="x"), 1)

    @pytest.mark.asyncio
    async def test_find_google_synced_events_returns_only_linked_events(self, event_repo):
        await event_repo.create(_event(title="Local only"))
        linked = await event_repo.create(
            _event(title="From Google", google_event_id="g1", google_etag='"e1"', google_synced_at=SYNCED_AT)
        )
        await event_repo.create(_event(user_id="other-user", google_event_id="g2"))

        synced = await event_repo.find_google_synced_events(USER_ID)

        assert len(synced) == 1
        info = synced[0]
        assert info.event_id == linked.id
        assert info.google_event_id == "g1"
        assert info.google_etag == '"e1"'
        assert info.google_synced_at == SYNCED_AT
        assert info.updated_at == SYNCED_AT
        assert info.version == 1
        assert info.title == "From Google"

    @pytest.mark.asyncio
    async def test_local_edit_after_sync_is_visible_as_newer(self, db):
        repo = SqliteEventRepository(connection=db, clock=lambda: NOW)
        event = await repo.create(_event(google_event_id="g1", google_synced_at=SYNCED_AT))
        await repo.update(USER_ID, event.id, EventUpdate(location="Room 2"), 1)

        info = (await repo.find_google_synced_events(USER_ID))[0]
        assert info.updated_at > info.google_synced_at

    @pytest.mark.asyncio
    async def test_google_event_id_is_unique_per_user(self, event_repo):
        await event_repo.create(_event(google_event_id="g1"))
        with pytest.raises(sqlite3.IntegrityError):
            await event_repo.create(_event(google_event_id="g1"))


# ---------------------------------------------------------------------------
# SqliteNotificationRepository
# ---------------------------------------------------------------------------


class TestNotificationRepository:
    @pytest.mark.asyncio
    async def test_create_round_trips_metadata(self, notification_repo):
        metadata = {
            "imported": 3,
            "skipped": 1,
            "conflicts": [{"event_id": "e1", "title": "Lunch"}],
        }
        notification = await notification_repo.create(
            NotificationCreate(
                user_id=USER_ID,
                type="GOOGLE_IMPORT",
                title="Google Calendar Import Complete",
                message="3 events imported, 1 conflicts detected",
                metadata=metadata,
            )
        )

        assert notification.id
        assert notification.created_at == NOW
        assert notification.read_at is None
        assert notification.metadata == metadata

    @pytest.mark.asyncio
    async def test_list_is_newest_first_and_limited(self, notification_repo):
        for i in range(3):
            await notification_repo.create(
                NotificationCreate(user_id=USER_ID, type="T", title=f"n{i}", message="m")
            )
        await notification_repo.create(
            NotificationCreate(user_id="other-user", type="T", title="other", message="m")
        )

        listed = await notification_repo.list_for_user(USER_ID, limit=2)

        assert [n.title for n in listed] == ["n2", "n1"]

    @pytest.mark.asyncio
    async def test_list_empty(self, notification_repo):
        assert await notification_repo.list_for_user(USER_ID) == []
