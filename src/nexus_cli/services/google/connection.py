"""Connect / disconnect / status flows for the Google Calendar integration."""

from __future__ import annotations

import base64
import binascii
import logging
import secrets
from collections.abc import Callable
from datetime import UTC, datetime
from urllib.parse import urlencode

from nexus_cli.errors import ConfigurationError, NotConnectedError, ValidationError
from nexus_cli.models import GoogleConfig, GoogleConnectionStatus, GoogleOAuthTokens
from nexus_cli.repositories import UserRepository

from .client import GOOGLE_AUTH_URL, GoogleCalendarClientProtocol

logger = logging.getLogger(__name__)


def encode_state(user_id: str, nonce: str | None = None) -> str:
    """Encode ``"{user_id}:{nonce}"`` as unpadded base64url."""
    nonce = nonce or secrets.token_hex(16)
    raw = f"{user_id}:{nonce}".encode()
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def decode_state(state: str) -> str:
    """Return the user id carried by an OAuth ``state`` value.

    Raises:
        ValidationError: The state is not base64url or has no user id part.
    """
    padded = state + "=" * (-len(state) % 4)
    try:
        decoded = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (binascii.Error, UnicodeError, ValueError) as exc:
        raise ValidationError("Invalid state parameter") from exc

    user_id = decoded.split(":", 1)[0]
    if not user_id:
        raise ValidationError("Invalid state parameter")
    return user_id


def build_authorization_url(config: GoogleConfig, user_id: str) -> tuple[str, str]:
    """Return ``(authorization_url, state)`` for the consent screen.

    Raises:
        ConfigurationError: No OAuth client id is configured.
    """
    if not config.client_id:
        raise ConfigurationError("Google OAuth is not configured")

    state = encode_state(user_id)
    query = urlencode(
        {
            "client_id": config.client_id,
            "redirect_uri": config.redirect_uri,
            "response_type": "code",
            "scope": " ".join(config.scopes),
            # offline + consent so Google returns a refresh token every time
            "access_type": "offline",
            "prompt": "consent",
            "state": state,
        }
    )
    return f"{GOOGLE_AUTH_URL}?{query}", state


class GoogleCalendarConnectionService:
    """Stores, inspects and removes a user's Google Calendar connection."""

    def __init__(
        self,
        client: GoogleCalendarClientProtocol,
        user_repo: UserRepository,
        *,
        redirect_uri: str,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._user_repo = user_repo
        self._redirect_uri = redirect_uri
        self._clock = clock or (lambda: datetime.now(UTC))

    async def connect(self, code: str, state: str) -> GoogleConnectionStatus:
        """Finish the OAuth flow and save the credentials for the state's user.

        Raises:
            ValidationError: Invalid ``state`` or empty ``code``.
            GoogleApiError: Code exchange or user-info lookup failed.
        """
        user_id = decode_state(state)
        if not code or not code.strip():
            raise ValidationError("Authorization code is required")

        tokens = await self._client.exchange_code_for_tokens(
            code.strip(), self._redirect_uri
        )
        if not tokens.refresh_token:
            logger.warning(
                "No refresh token received for user %s; "
                "access must be revoked and reconnected to renew it",
                user_id,
            )

        user_info = await self._client.get_user_info(tokens.access_token)
        connected_at = self._clock()

        await self._user_repo.save_google_oauth(
            user_id,
            GoogleOAuthTokens(
                access_token=tokens.access_token,
                refresh_token=tokens.refresh_token,
                expires_at=tokens.expires_at,
                email=user_info.email,
                connected_at=connected_at,
            ),
        )
        logger.info("Connected Google Calendar %s for user %s", user_info.email, user_id)
        return GoogleConnectionStatus(
            connected=True, email=user_info.email, connected_at=connected_at
        )

    async def disconnect(self, user_id: str) -> None:
        """Revoke access at Google (best effort) and drop stored credentials.

        Raises:
            NotConnectedError: Nothing is stored for the user.
        """
        meta = await self._user_repo.find_meta(user_id)
        if meta is None or meta.google_oauth is None:
            raise NotConnectedError()

        if meta.google_oauth.access_token:
            await self._client.revoke_token(meta.google_oauth.access_token)

        await self._user_repo.remove_google_oauth(user_id)
        logger.info("Disconnected Google Calendar for user %s", user_id)

    async def status(self, user_id: str) -> GoogleConnectionStatus:
        meta = await self._user_repo.find_meta(user_id)
        if meta is None or meta.google_oauth is None:
            return GoogleConnectionStatus(connected=False)

        sync_state = meta.google_calendar_sync
        return GoogleConnectionStatus(
            connected=True,
            email=meta.google_oauth.email or None,
            connected_at=meta.google_oauth.connected_at,
            last_sync_at=sync_state.last_sync_at if sync_state else None,
        )
