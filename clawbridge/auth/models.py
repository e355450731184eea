"""Data models for the Claude CLI and Clawdbot credential stores."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(datetime.now(UTC).timestamp() * 1000)


class OAuthToken(BaseModel):
    """OAuth token information from Claude credentials."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    access_token: str = Field(..., alias="accessToken")
    refresh_token: str = Field(..., alias="refreshToken")
    expires_at: int = Field(..., alias="expiresAt")
    scopes: list[str] | None = None
    subscription_type: str | None = Field(None, alias="subscriptionType")

    @property
    def is_expired(self) -> bool:
        """Check if the token is expired."""
        return now_ms() >= self.expires_at

    def expires_within(self, seconds: float) -> bool:
        """Check if the token expires within the given number of seconds."""
        return now_ms() > self.expires_at - int(seconds * 1000)

    @property
    def expires_at_datetime(self) -> datetime:
        """Get expiration as datetime object."""
        return datetime.fromtimestamp(self.expires_at / 1000, tz=UTC)


class ClaudeCredentials(BaseModel):
    """Claude credentials from the credentials file."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    claude_ai_oauth: OAuthToken | None = Field(None, alias="claudeAiOauth")


class ClawdbotToken(BaseModel):
    """Anthropic token entry as stored by Clawdbot."""

    access: str
    refresh: str
    expires: int

    @property
    def expires_at_datetime(self) -> datetime:
        return datetime.fromtimestamp(self.expires / 1000, tz=UTC)

    @classmethod
    def from_oauth_token(cls, token: OAuthToken) -> "ClawdbotToken":
        return cls(
            access=token.access_token,
            refresh=token.refresh_token,
            expires=token.expires_at,
        )


class ClawdbotOAuthStore(BaseModel):
    """Clawdbot OAuth file; keys for other providers are kept as-is."""

    model_config = ConfigDict(extra="allow")

    anthropic: ClawdbotToken | None = None
