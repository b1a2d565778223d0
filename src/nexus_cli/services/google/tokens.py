"""Access-token lifecycle for the Google Calendar integration."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

from nexus_cli.errors import ReauthRequiredError
from nexus_cli.models import GoogleOAuthTokens
from nexus_cli.repositories import UserRepository

from .client import GoogleCalendarClientProtocol

DEFAULT_REFRESH_BUFFER_SECONDS = 300

logger = logging.getLogger(__name__)


class TokenManager:
    """Hands out an access token that stays valid for at least the buffer.

    Args:
        client: Google client used for the refresh-token exchange.
        user_repo: Credential store the refreshed token is written back to.
        buffer_seconds: Tokens expiring within this many seconds are refreshed.
        clock: Returns the current time.
    """

    def __init__(
        self,
        client: GoogleCalendarClientProtocol,
        user_repo: UserRepository,
        *,
        buffer_seconds: int = DEFAULT_REFRESH_BUFFER_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._client = client
        self._user_repo = user_repo
        self._buffer = timedelta(seconds=buffer_seconds)
        self._clock = clock or (lambda: datetime.now(UTC))

    def needs_refresh(self, tokens: GoogleOAuthTokens) -> bool:
        """True unless ``now + buffer`` is strictly before the expiry."""
        if tokens.expires_at is None:
            return True
        expires_at = tokens.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return not (self._clock() + self._buffer < expires_at)

    async def get_valid_access_token(
        self, user_id: str, tokens: GoogleOAuthTokens
    ) -> str:
        """Return a usable access token, refreshing and persisting it if needed.

        Raises:
            ReauthRequiredError: The token is (about to be) expired and there
                is no refresh token.
            TokenRefreshError: The refresh call failed.
        """
        if not self.needs_refresh(tokens):
            return tokens.access_token

        if not tokens.is_renewable:
            logger.warning("Access token for user %s expired with no refresh token", user_id)
            raise ReauthRequiredError()

        logger.info("Refreshing Google access token for user %s", user_id)
        refreshed = await self._client.refresh_access_token(tokens.refresh_token)
        await self._user_repo.update_access_token(
            user_id, refreshed.access_token, refreshed.expires_at
        )
        return refreshed.access_token
