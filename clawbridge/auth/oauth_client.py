"""OAuth client for refreshing Claude access tokens."""

from typing import Any

import httpx

from clawbridge.auth.exceptions import OAuthTokenRefreshError
from clawbridge.auth.models import ClawdbotToken, now_ms
from clawbridge.config.oauth import OAuthSettings
from clawbridge.core.logging import get_logger


logger = get_logger(__name__)


class OAuthClient:
    """Client for the Anthropic OAuth token endpoint."""

    def __init__(
        self,
        config: OAuthSettings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize OAuth client.

        Args:
            config: OAuth configuration (uses defaults if not provided)
            http_client: HTTP client for making requests (creates one if not provided)
        """
        self.config = config or OAuthSettings()
        self._http_client = http_client
        self._owns_http_client = http_client is None

    async def __aenter__(self) -> "OAuthClient":
        """Async context manager entry."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.config.request_timeout)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        if self._owns_http_client and self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Get the HTTP client, creating one if needed."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.config.request_timeout)
        return self._http_client

    async def refresh_token(self, refresh_token: str) -> ClawdbotToken:
        """Exchange a refresh token for a new access token.

        The returned expiry is shortened by ``config.expiry_buffer`` so the
        token is treated as stale a little before the server expires it.

        Args:
            refresh_token: The refresh token to use

        Returns:
            New token in Clawdbot's format

        Raises:
            OAuthTokenRefreshError: If token refresh fails
        """
        data = {
            "grant_type": "refresh_token",
            "client_id": self.config.client_id,
            "refresh_token": refresh_token,
        }

        try:
            response = await self.http_client.post(
                self.config.token_url,
                headers={"Content-Type": "application/json"},
                json=data,
                timeout=self.config.request_timeout,
            )
        except httpx.RequestError as e:
            raise OAuthTokenRefreshError(
                f"Token refresh failed: network error: {e}"
            ) from e

        if not response.is_success:
            logger.error(
                "token_refresh_rejected",
                status_code=response.status_code,
                token_url=self.config.token_url,
            )
            raise OAuthTokenRefreshError(f"Token refresh failed: {response.text}")

        try:
            result = response.json()
            access_token = result["access_token"]
            expires_in = float(result["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            raise OAuthTokenRefreshError(
                f"Token refresh failed: malformed response: {e}"
            ) from e

        expires = (
            now_ms()
            + int(expires_in * 1000)
            - int(self.config.expiry_buffer * 1000)
        )

        logger.debug("token_refresh_completed", expires_in=expires_in)
        return ClawdbotToken(
            access=access_token,
            refresh=result.get("refresh_token") or refresh_token,
            expires=expires,
        )
