"""OAuth and credential store configuration settings."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


CLAUDE_TOKEN_URL = "https://console.anthropic.com/v1/oauth/token"
CLAUDE_CLIENT_ID = "9d1c250a-e61b-44d9-88ed-5944d1962f5e"


class OAuthSettings(BaseModel):
    """Token refresh settings for the Anthropic OAuth endpoint."""

    token_url: str = Field(
        default=CLAUDE_TOKEN_URL,
        description="OAuth token endpoint used for refresh_token grants",
    )

    client_id: str = Field(
        default=CLAUDE_CLIENT_ID,
        description="OAuth client ID of the Claude Code CLI",
    )

    expiry_buffer: float = Field(
        default=300.0,
        ge=0.0,
        description="Seconds subtracted from the lifetime of a freshly refreshed token",
    )

    refresh_threshold: float = Field(
        default=600.0,
        ge=0.0,
        description="Refresh stored tokens that expire within this many seconds",
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0.0,
        description="Timeout in seconds for the token request",
    )


class PathSettings(BaseModel):
    """Locations of the source and target credential stores."""

    model_config = ConfigDict(validate_default=True)

    claude_credentials: Path = Field(
        default=Path("~/.claude/.credentials.json"),
        description="Claude Code CLI credentials file (source)",
    )

    clawdbot_oauth: Path = Field(
        default=Path("~/.clawdbot/credentials/oauth.json"),
        description="Clawdbot OAuth store (target)",
    )

    @field_validator("claude_credentials", "clawdbot_oauth")
    @classmethod
    def expand_user(cls, v: Path) -> Path:
        return Path(v).expanduser()
