"""Tests for credential models."""

from datetime import UTC, datetime, timedelta

from clawbridge.auth.models import (
    ClaudeCredentials,
    ClawdbotOAuthStore,
    ClawdbotToken,
    OAuthToken,
)


class TestOAuthToken:
    """Test OAuth token model."""

    def test_oauth_token_parsing(self):
        """Test parsing OAuth token from Claude CLI JSON data."""
        token = OAuthToken.model_validate(
            {
                "accessToken": "test-access-token",
                "refreshToken": "test-refresh-token",
                "expiresAt": 1751896667201,
                "scopes": ["user:inference", "user:profile"],
                "subscriptionType": "max",
            }
        )

        assert token.access_token == "test-access-token"
        assert token.refresh_token == "test-refresh-token"
        assert token.expires_at == 1751896667201
        assert token.scopes == ["user:inference", "user:profile"]
        assert token.subscription_type == "max"

    def test_expiry_checks(self):
        """Test expiry and near-expiry checks."""
        in_five_minutes = int(
            (datetime.now(UTC) + timedelta(minutes=5)).timestamp() * 1000
        )
        token = OAuthToken.model_validate(
            {
                "accessToken": "a",
                "refreshToken": "r",
                "expiresAt": in_five_minutes,
            }
        )

        assert not token.is_expired
        assert token.expires_within(600)
        assert not token.expires_within(60)

    def test_expires_at_datetime_conversion(self):
        """Test conversion of expires_at to datetime."""
        token = OAuthToken.model_validate(
            {"accessToken": "a", "refreshToken": "r", "expiresAt": 1751896667201}
        )
        assert token.expires_at_datetime == datetime.fromtimestamp(
            1751896667.201, tz=UTC
        )


class TestClaudeCredentials:
    """Test Claude credentials model."""

    def test_credentials_without_oauth_section(self):
        """Test that a file without claudeAiOauth parses to an empty section."""
        credentials = ClaudeCredentials.model_validate({"somethingElse": {}})
        assert credentials.claude_ai_oauth is None

    def test_credentials_keep_unknown_keys(self):
        """Test that unknown top-level keys survive a dump."""
        credentials = ClaudeCredentials.model_validate(
            {
                "claudeAiOauth": {
                    "accessToken": "a",
                    "refreshToken": "r",
                    "expiresAt": 1,
                },
                "mcpOAuth": {"server": "x"},
            }
        )
        dumped = credentials.model_dump(by_alias=True, exclude_none=True)
        assert dumped["mcpOAuth"] == {"server": "x"}
        assert dumped["claudeAiOauth"]["accessToken"] == "a"


class TestClawdbotModels:
    """Test Clawdbot store models."""

    def test_token_from_oauth_token(self):
        """Test converting a Claude CLI token to Clawdbot's format."""
        oauth = OAuthToken(accessToken="a", refreshToken="r", expiresAt=42)
        token = ClawdbotToken.from_oauth_token(oauth)
        assert token == ClawdbotToken(access="a", refresh="r", expires=42)

    def test_store_preserves_other_providers(self):
        """Test that non-anthropic keys are kept as extra fields."""
        store = ClawdbotOAuthStore.model_validate(
            {
                "openai": {"access": "o", "refresh": "p", "expires": 1},
                "anthropic": {"access": "a", "refresh": "r", "expires": 2},
            }
        )
        assert store.anthropic is not None
        assert store.anthropic.access == "a"
        assert store.model_dump()["openai"] == {
            "access": "o",
            "refresh": "p",
            "expires": 1,
        }
