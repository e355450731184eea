"""Errors raised while reading, refreshing and relaying OAuth credentials."""


class CredentialsError(Exception):
    """Base class for credential relay failures."""

    pass


class CredentialsNotFoundError(CredentialsError):
    """The Claude CLI has no credentials file or no OAuth section in it."""

    pass


class CredentialsInvalidError(CredentialsError):
    """A credentials file exists but does not hold the expected JSON."""

    pass


class CredentialsStorageError(CredentialsError):
    """A credentials file could not be read or written."""

    pass


class OAuthError(CredentialsError):
    """Base class for errors talking to the OAuth token endpoint."""

    pass


class OAuthTokenRefreshError(OAuthError):
    """The refresh_token grant was rejected or could not be completed."""

    pass
