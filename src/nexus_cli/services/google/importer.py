"""GoogleCalendarSyncService - orchestrates Google Calendar → Nexus sync.

One call to :meth:`GoogleCalendarSyncService.sync` is one sequential run:

    NOT_CONNECTED? → TOKEN_CHECK → FETCHING_INCREMENTAL → [410] FETCHING_FULL
    → RECONCILING → PERSISTING → NOTIFYING → DONE

Token and fetch failures abort the run before anything is written. Failures
writing a single event only skip that event.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from enum import Enum

from nexus_cli.errors import (
    GoogleApiError,
    NotConnectedError,
    SyncTokenInvalidError,
    VersionConflictError,
)
from nexus_cli.models import (
    GoogleCalendarSyncState,
    GoogleImportResult,
    NotificationCreate,
    UserMeta,
)
from nexus_cli.repositories import (
    EventRepository,
    NotificationRepository,
    UserRepository,
)

from .client import GoogleCalendarClientProtocol
from .mapper import map_google_event
from .models import FetchEventsResult
from .reconciler import ConflictReconciler, ReconcileDecision, SyncAction, conflict_for
from .tokens import TokenManager

NOTIFICATION_TYPE = "GOOGLE_IMPORT"
NOTIFICATION_TITLE = "Google Calendar Import Complete"

logger = logging.getLogger(__name__)


class SyncStage(str, Enum):
    NOT_CONNECTED = "not_connected"
    TOKEN_CHECK = "token_check"
    FETCHING_INCREMENTAL = "fetching_incremental"
    FETCHING_FULL = "fetching_full"
    RECONCILING = "reconciling"
    PERSISTING = "persisting"
    NOTIFYING = "notifying"
    DONE = "done"
    FAILED = "failed"


class GoogleCalendarSyncService:
    """Imports Google Calendar changes into the local event store.

    Args:
        client: Google API client implementing :class:`GoogleCalendarClientProtocol`.
        user_repo: Credential and sync-cursor store.
        event_repo: Local event store.
        notification_repo: Store for the per-run summary notification.
        token_manager: Token lifecycle manager; built from *client* and
            *user_repo* when omitted.
        calendar_id: Google calendar id recorded on imported events.
        clock: Returns the current time.
    """

    def __init__(
        self,
        client: GoogleCalendarClientProtocol,
        user_repo: UserRepository,
        event_repo: EventRepository,
        notification_repo: NotificationRepository,
        *,
        token_manager: TokenManager | None = None,
        calendar_id: str = "primary",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._user_repo = user_repo
        self._event_repo = event_repo
        self._notification_repo = notification_repo
        self._clock = clock or (lambda: datetime.now(UTC))
        self._token_manager = token_manager or TokenManager(
            client, user_repo, clock=self._clock
        )
        self._calendar_id = calendar_id
        self.stage: SyncStage | None = None

    async def sync(self, user_id: str) -> GoogleImportResult:
        """Run one sync for *user_id* and return its summary.

        Raises:
            NotConnectedError: No stored Google credentials.
            ReauthRequiredError: Token expired and cannot be renewed.
            TokenRefreshError: Token refresh failed.
            GoogleApiError: Fetching events failed (including a second
                cursor invalidation).
        """
        try:
            return await self._run(user_id)
        except Exception:
            if self.stage is not SyncStage.NOT_CONNECTED:
                self._enter(SyncStage.FAILED)
            raise

    async def _run(self, user_id: str) -> GoogleImportResult:
        meta = await self._user_repo.find_meta(user_id)
        tokens = meta.google_oauth if meta else None
        if tokens is None or not tokens.access_token:
            self._enter(SyncStage.NOT_CONNECTED)
            raise NotConnectedError()

        now = self._clock()

        self._enter(SyncStage.TOKEN_CHECK)
        access_token = await self._token_manager.get_valid_access_token(user_id, tokens)

        fetched = await self._fetch(access_token, _sync_token_of(meta))

        self._enter(SyncStage.RECONCILING)
        synced_events = await self._event_repo.find_google_synced_events(user_id)
        reconciler = ConflictReconciler(synced_events)
        decisions = [
            reconciler.reconcile(
                map_google_event(event, synced_at=now, calendar_id=self._calendar_id)
            )
            for event in fetched.events
        ]

        self._enter(SyncStage.PERSISTING)
        result = GoogleImportResult(
            full_sync=fetched.full_sync, skipped=fetched.malformed
        )
        for decision in decisions:
            await self._apply(user_id, decision, result)

        await self._user_repo.update_sync_state(
            user_id,
            GoogleCalendarSyncState(
                sync_token=fetched.next_sync_token, last_sync_at=now
            ),
        )

        self._enter(SyncStage.NOTIFYING)
        notification = await self._notification_repo.create(
            NotificationCreate(
                user_id=user_id,
                type=NOTIFICATION_TYPE,
                title=NOTIFICATION_TITLE,
                message=(
                    f"{result.imported} events imported, "
                    f"{len(result.conflicts)} conflicts detected"
                ),
                metadata={
                    "imported": result.imported,
                    "skipped": result.skipped,
                    "conflicts": [c.model_dump(mode="json") for c in result.conflicts],
                },
            )
        )
        result.notification_id = notification.id

        self._enter(SyncStage.DONE)
        logger.info(
            "Sync for user %s done: %d imported, %d skipped, %d conflicts",
            user_id,
            result.imported,
            result.skipped,
            len(result.conflicts),
        )
        return result

    async def _fetch(
        self, access_token: str, sync_token: str | None
    ) -> FetchEventsResult:
        if sync_token:
            self._enter(SyncStage.FETCHING_INCREMENTAL)
            try:
                return await self._client.fetch_events(
                    access_token, sync_token=sync_token
                )
            except SyncTokenInvalidError:
                logger.warning("Sync token rejected by Google, falling back to full sync")

        self._enter(SyncStage.FETCHING_FULL)
        try:
            return await self._client.fetch_events(access_token)
        except SyncTokenInvalidError as exc:
            raise GoogleApiError(410, "Google Calendar rejected the full sync") from exc

    async def _apply(
        self,
        user_id: str,
        decision: ReconcileDecision,
        result: GoogleImportResult,
    ) -> None:
        """Carry out one decision; write failures only skip this event."""
        event = decision.event

        if decision.action is SyncAction.SKIP:
            result.skipped += 1
            return

        if decision.action is SyncAction.CONFLICT:
            logger.info(
                "Conflict on event %s (%s): local copy kept",
                decision.existing.event_id,
                decision.reason,
            )
            result.conflicts.append(decision.conflict)
            result.skipped += 1
            return

        if decision.action is SyncAction.CREATE:
            try:
                await self._event_repo.create(event.to_create(user_id))
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Failed to import Google event %s: %s", event.google_event_id, exc
                )
                result.skipped += 1
                return
            result.imported += 1
            return

        existing = decision.existing
        try:
            await self._event_repo.update(
                user_id,
                existing.event_id,
                event.to_update(),
                decision.expected_version,
            )
        except VersionConflictError:
            logger.warning(
                "Event %s changed during sync (expected version %d)",
                existing.event_id,
                existing.version,
            )
            result.conflicts.append(conflict_for(existing, event))
            result.skipped += 1
            return
        except Exception as exc:  # noqa: BLE001
            logger.error("Failed to update event %s: %s", existing.event_id, exc)
            result.skipped += 1
            return
        result.imported += 1

    def _enter(self, stage: SyncStage) -> None:
        logger.debug("sync stage: %s -> %s", self.stage.value if self.stage else "-", stage.value)
        self.stage = stage


def _sync_token_of(meta: UserMeta) -> str | None:
    if meta.google_calendar_sync is None:
        return None
    return meta.google_calendar_sync.sync_token or None
