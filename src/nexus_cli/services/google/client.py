"""Google Calendar / OAuth HTTP client.

Defines a Protocol for testability (Dependency Inversion) and a
concrete implementation backed by httpx.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any, Protocol, runtime_checkable
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from nexus_cli.errors import (
    GoogleApiError,
    SyncTokenInvalidError,
    TokenRefreshError,
)
from nexus_cli.models import FullSyncWindow

from .models import (
    FetchEventsResult,
    GoogleCalendarEvent,
    GoogleUserInfo,
    TokenExchangeResult,
    TokenRefreshResult,
)

GOOGLE_AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_REVOKE_URL = "https://oauth2.googleapis.com/revoke"
GOOGLE_USERINFO_URL = "https://www.googleapis.com/oauth2/v2/userinfo"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"

_DEFAULT_TIMEOUT = 30.0
_DEFAULT_PAGE_SIZE = 250
_DEFAULT_EXPIRES_IN = 3600

logger = logging.getLogger(__name__)


@runtime_checkable
class GoogleCalendarClientProtocol(Protocol):
    """Abstract interface for the Google endpoints the sync engine needs.

    Keeping this as a Protocol (not ABC) means tests can pass any object
    that satisfies the interface without subclassing.
    """

    async def refresh_access_token(self, refresh_token: str) -> TokenRefreshResult:
        """Exchange a refresh token for a new access token."""
        ...

    async def exchange_code_for_tokens(
        self, code: str, redirect_uri: str
    ) -> TokenExchangeResult:
        """Exchange an authorization code for access and refresh tokens."""
        ...

    async def get_user_info(self, access_token: str) -> GoogleUserInfo:
        """Return the connected account's profile."""
        ...

    async def fetch_events(
        self,
        access_token: str,
        *,
        sync_token: str | None = None,
        time_min: datetime | None = None,
        time_max: datetime | None = None,
    ) -> FetchEventsResult:
        """Return every changed event plus the cursor for the next run."""
        ...

    async def revoke_token(self, token: str) -> None:
        """Revoke a token at Google; never raises."""
        ...


class GoogleCalendarClient:
    """Concrete Google Calendar API v3 client using httpx.

    Args:
        client_id: OAuth client id.
        client_secret: OAuth client secret.
        calendar_id: Calendar to read events from.
        page_size: ``maxResults`` sent with every events-list request.
        sync_window: Time window for full syncs.
        timeout: HTTP request timeout in seconds.
        clock: Returns the current time; used for token expiry and the
            full-sync window.
        transport: Optional httpx transport (useful for testing).
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        *,
        calendar_id: str = "primary",
        page_size: int = _DEFAULT_PAGE_SIZE,
        sync_window: FullSyncWindow | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
        clock: Callable[[], datetime] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._calendar_id = calendar_id
        self._page_size = page_size
        self._sync_window = sync_window or FullSyncWindow()
        self._timeout = timeout
        self._clock = clock or (lambda: datetime.now(UTC))
        self._transport = transport

    # ------------------------------------------------------------------
    # OAuth
    # ------------------------------------------------------------------

    async def refresh_access_token(self, refresh_token: str) -> TokenRefreshResult:
        """Refresh the access token.

        Raises:
            TokenRefreshError: On any transport failure, non-2xx status or
                malformed response. Never retried here.
        """
        try:
            async with self._http() as client:
                response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "client_id": self._client_id,
                        "client_secret": self._client_secret,
                        "refresh_token": refresh_token,
                        "grant_type": "refresh_token",
                    },
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.error("Token refresh request failed: %s", exc)
            raise TokenRefreshError() from exc

        if not response.is_success:
            logger.error(
                "Token refresh failed (%s): %s",
                response.status_code,
                _safe_error_message(response),
            )
            raise TokenRefreshError()

        try:
            payload = _json_object(response)
        except GoogleApiError as exc:
            logger.error("Token refresh response is not a JSON object")
            raise TokenRefreshError() from exc
        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token.strip():
            logger.error("Token refresh response is missing access_token")
            raise TokenRefreshError()

        return TokenRefreshResult(
            access_token=access_token.strip(),
            expires_at=self._expiry_from(payload.get("expires_in")),
        )

    async def exchange_code_for_tokens(
        self, code: str, redirect_uri: str
    ) -> TokenExchangeResult:
        """Exchange an authorization code for tokens.

        Raises:
            GoogleApiError: On a non-2xx response or transport failure.
        """
        try:
            async with self._http() as client:
                response = await client.post(
                    GOOGLE_TOKEN_URL,
                    data={
                        "client_id": self._client_id,
                        "client_secret": self._client_secret,
                        "code": code,
                        "grant_type": "authorization_code",
                        "redirect_uri": redirect_uri,
                    },
                    headers={"Accept": "application/json"},
                )
        except httpx.HTTPError as exc:
            logger.error("Token exchange request failed: %s", exc)
            raise GoogleApiError(0, "Failed to exchange authorization code") from exc

        if not response.is_success:
            logger.error(
                "Token exchange failed (%s): %s",
                response.status_code,
                _safe_error_message(response),
            )
            raise GoogleApiError(
                response.status_code, "Failed to exchange authorization code"
            )

        payload = _json_object(response)
        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise GoogleApiError(
                response.status_code, "Failed to exchange authorization code"
            )

        refresh_token = payload.get("refresh_token")
        return TokenExchangeResult(
            access_token=access_token,
            refresh_token=refresh_token if isinstance(refresh_token, str) else None,
            expires_at=self._expiry_from(payload.get("expires_in")),
        )

    async def get_user_info(self, access_token: str) -> GoogleUserInfo:
        """Return the profile of the account the token belongs to."""
        try:
            async with self._http() as client:
                response = await client.get(
                    GOOGLE_USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as exc:
            logger.error("User info request failed: %s", exc)
            raise GoogleApiError(0, "Failed to get user info from Google") from exc

        if not response.is_success:
            logger.error(
                "User info failed (%s): %s",
                response.status_code,
                _safe_error_message(response),
            )
            raise GoogleApiError(
                response.status_code, "Failed to get user info from Google"
            )

        try:
            return GoogleUserInfo.model_validate(_json_object(response))
        except PydanticValidationError as exc:
            raise GoogleApiError(
                response.status_code, "Failed to get user info from Google"
            ) from exc

    async def revoke_token(self, token: str) -> None:
        """Revoke a token at Google (best effort, failures are only logged)."""
        try:
            async with self._http() as client:
                response = await client.post(
                    GOOGLE_REVOKE_URL,
                    data={"token": token},
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as exc:
            logger.warning("Failed to revoke token at Google: %s", exc)
            return

        if not response.is_success:
            logger.warning(
                "Failed to revoke token at Google (%s): %s",
                response.status_code,
                _safe_error_message(response),
            )

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def fetch_events(
        self,
        access_token: str,
        *,
        sync_token: str | None = None,
        time_min: datetime | None = None,
        time_max: datetime | None = None,
    ) -> FetchEventsResult:
        """Fetch all pages of events for the configured calendar.

        With a ``sync_token`` only the changes since that token was issued are
        requested and no time window is sent. Without one, the request is
        scoped by ``time_min``/``time_max`` or, if absent, the configured
        full-sync window.

        Raises:
            SyncTokenInvalidError: Google answered 410 Gone; the cursor must
                be discarded and a full sync performed.
            GoogleApiError: Any other non-2xx status, transport failure or
                malformed payload.
        """
        params: dict[str, Any] = {"maxResults": self._page_size}
        if sync_token:
            params["syncToken"] = sync_token
        else:
            default_min, default_max = self._sync_window.bounds(self._clock())
            params["timeMin"] = _rfc3339(time_min or default_min)
            params["timeMax"] = _rfc3339(time_max or default_max)
            params["singleEvents"] = "false"

        url = (
            f"{GOOGLE_CALENDAR_API}/calendars/"
            f"{quote(self._calendar_id, safe='')}/events"
        )
        headers = {"Authorization": f"Bearer {access_token}"}

        events: list[GoogleCalendarEvent] = []
        next_sync_token: str | None = None
        page_token: str | None = None
        pages = 0
        malformed = 0

        async with self._http() as client:
            while True:
                if page_token:
                    params["pageToken"] = page_token
                else:
                    params.pop("pageToken", None)

                try:
                    response = await client.get(url, params=params, headers=headers)
                except httpx.HTTPError as exc:
                    logger.error("Google Calendar request failed: %s", exc)
                    raise GoogleApiError(0) from exc

                if response.status_code == 410:
                    raise SyncTokenInvalidError()
                if not response.is_success:
                    logger.error(
                        "Google Calendar API error (%s): %s",
                        response.status_code,
                        _safe_error_message(response),
                    )
                    raise GoogleApiError(response.status_code)

                payload = _json_object(response)
                pages += 1
                parsed, dropped = _parse_items(payload.get("items"))
                events.extend(parsed)
                malformed += dropped

                candidate = payload.get("nextSyncToken")
                if isinstance(candidate, str) and candidate:
                    next_sync_token = candidate

                page_token = payload.get("nextPageToken") or None
                if not page_token:
                    break

        logger.info(
            "Fetched %d events in %d page(s) (%s mode)",
            len(events),
            pages,
            "incremental" if sync_token else "full",
        )
        return FetchEventsResult(
            events=events,
            next_sync_token=next_sync_token,
            full_sync=not sync_token,
            malformed=malformed,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    def _expiry_from(self, expires_in: Any) -> datetime:
        if isinstance(expires_in, bool) or not isinstance(expires_in, int | float):
            seconds = _DEFAULT_EXPIRES_IN
        else:
            seconds = int(expires_in) if expires_in > 0 else _DEFAULT_EXPIRES_IN
        return self._clock() + timedelta(seconds=seconds)


def _parse_items(items: Any) -> tuple[list[GoogleCalendarEvent], int]:
    """Parse one page of items; returns the events and how many were dropped."""
    if not isinstance(items, list):
        return [], 0

    events: list[GoogleCalendarEvent] = []
    dropped = 0
    for item in items:
        if not isinstance(item, dict):
            logger.warning("Skipping non-object item in Google events page")
            dropped += 1
            continue
        try:
            events.append(GoogleCalendarEvent.model_validate(item))
        except PydanticValidationError as exc:
            logger.warning(
                "Skipping malformed Google event %r: %s",
                item.get("id"),
                exc.error_count(),
            )
            dropped += 1
    return events, dropped


def _json_object(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise GoogleApiError(
            response.status_code, "Google returned an invalid response"
        ) from exc
    if not isinstance(payload, dict):
        raise GoogleApiError(response.status_code, "Google returned an invalid response")
    return payload


def _safe_error_message(response: httpx.Response) -> str:
    """Short single-line description of an error response, for logs only."""
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            if isinstance(message, str) and message.strip():
                return " ".join(message.split())[:200]
        if isinstance(error, str) and error.strip():
            description = payload.get("error_description")
            if isinstance(description, str) and description.strip():
                return f"{error}: {' '.join(description.split())}"[:200]
            return error[:200]

    text = " ".join(response.text.split())
    return text[:200] if text else "no response body"


def _rfc3339(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
