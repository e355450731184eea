"""Relay Claude Code CLI OAuth credentials into the Clawdbot store."""

from dataclasses import dataclass
from pathlib import Path

import httpx

from clawbridge.auth.exceptions import CredentialsNotFoundError
from clawbridge.auth.models import ClawdbotToken, now_ms
from clawbridge.auth.oauth_client import OAuthClient
from clawbridge.auth.storage import ClaudeTokenStorage, ClawdbotOAuthStorage
from clawbridge.config.settings import Settings, get_settings
from clawbridge.core.logging import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class SyncResult:
    """Outcome of a credential sync."""

    refreshed: bool
    token: ClawdbotToken
    target: Path


class CredentialSyncService:
    """Reads the Claude CLI token, refreshes it if needed and writes it to Clawdbot.

    The source file is only ever read. Refreshed tokens go to the
    target store alone.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        source: ClaudeTokenStorage | None = None,
        target: ClawdbotOAuthStorage | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.source = source or ClaudeTokenStorage(
            self.settings.paths.claude_credentials
        )
        self.target = target or ClawdbotOAuthStorage(
            self.settings.paths.clawdbot_oauth
        )
        self._http_client = http_client

    async def _load_source_token(self) -> ClawdbotToken:
        credentials = await self.source.load()
        if credentials is None:
            raise CredentialsNotFoundError(
                f"Claude credentials not found at {self.source.get_location()}. "
                "Run 'claude' CLI first to authenticate."
            )
        if credentials.claude_ai_oauth is None:
            raise CredentialsNotFoundError(
                "No OAuth credentials found in Claude config"
            )
        return ClawdbotToken.from_oauth_token(credentials.claude_ai_oauth)

    async def sync(self, force: bool = False) -> SyncResult:
        """Sync credentials from the Claude CLI store to the Clawdbot store.

        Args:
            force: Refresh the token even if it is still valid

        Returns:
            SyncResult describing what was written

        Raises:
            CredentialsNotFoundError: If the source has no usable credentials
            CredentialsInvalidError: If the source file is corrupt
            OAuthTokenRefreshError: If the refresh request fails
            CredentialsStorageError: If the target cannot be written
        """
        stored = await self._load_source_token()
        threshold_ms = int(self.settings.oauth.refresh_threshold * 1000)
        is_expired = now_ms() > stored.expires - threshold_ms

        if is_expired or force:
            logger.info("token_refresh_start", forced=force and not is_expired)
            async with OAuthClient(
                self.settings.oauth, http_client=self._http_client
            ) as client:
                token = await client.refresh_token(stored.refresh)
            logger.info(
                "token_refreshed",
                expires_at=token.expires_at_datetime.isoformat(),
            )
            refreshed = True
        else:
            logger.info(
                "token_valid",
                expires_at=stored.expires_at_datetime.isoformat(),
            )
            token = stored
            refreshed = False

        await self.target.update_anthropic(token)
        logger.info("credentials_synced", target=self.target.get_location())

        return SyncResult(
            refreshed=refreshed,
            token=token,
            target=self.target.file_path,
        )
