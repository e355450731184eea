"""Credential models, stores and OAuth relay."""

from clawbridge.auth.exceptions import (
    CredentialsError,
    CredentialsInvalidError,
    CredentialsNotFoundError,
    CredentialsStorageError,
    OAuthError,
    OAuthTokenRefreshError,
)
from clawbridge.auth.models import (
    ClaudeCredentials,
    ClawdbotOAuthStore,
    ClawdbotToken,
    OAuthToken,
)
from clawbridge.auth.oauth_client import OAuthClient
from clawbridge.auth.sync import CredentialSyncService, SyncResult


__all__ = [
    # Models
    "ClaudeCredentials",
    "OAuthToken",
    "ClawdbotOAuthStore",
    "ClawdbotToken",
    # OAuth
    "OAuthClient",
    # Sync
    "CredentialSyncService",
    "SyncResult",
    # Exceptions
    "CredentialsError",
    "CredentialsNotFoundError",
    "CredentialsInvalidError",
    "CredentialsStorageError",
    "OAuthError",
    "OAuthTokenRefreshError",
]
