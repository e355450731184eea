"""Clawdbot OAuth store (the sync target)."""

from pydantic import ValidationError

from clawbridge.auth.exceptions import CredentialsInvalidError
from clawbridge.auth.models import ClawdbotOAuthStore, ClawdbotToken
from clawbridge.auth.storage.base import JsonCredentialStore
from clawbridge.core.logging import get_logger


logger = get_logger(__name__)


class ClawdbotOAuthStorage(JsonCredentialStore[ClawdbotOAuthStore]):
    """Storage for Clawdbot's multi-provider OAuth file.

    The file is keyed by provider name. Only the ``anthropic`` entry is
    managed here; every other key is written back untouched.
    """

    async def load(self) -> ClawdbotOAuthStore:
        """Load the store.

        A missing file or one that is not a JSON object is treated as empty.
        An ``anthropic`` entry that does not validate is dropped; other
        providers are always kept.

        Raises:
            CredentialsStorageError: If the file exists but cannot be read
        """
        try:
            data = await self._read_json()
        except CredentialsInvalidError as e:
            logger.warning(
                "clawdbot_store_unreadable", path=str(self.file_path), error=str(e)
            )
            return ClawdbotOAuthStore()

        try:
            return ClawdbotOAuthStore.model_validate(data)
        except ValidationError as e:
            logger.warning(
                "clawdbot_anthropic_entry_invalid",
                path=str(self.file_path),
                error=str(e),
            )
            data.pop("anthropic", None)
            return ClawdbotOAuthStore.model_validate(data)

    async def save(self, credentials: ClawdbotOAuthStore) -> bool:
        data = credentials.model_dump(mode="json")
        if data.get("anthropic") is None:
            data.pop("anthropic", None)
        await self._write_json(data)
        logger.debug("clawdbot_store_saved", path=str(self.file_path))
        return True

    async def update_anthropic(self, token: ClawdbotToken) -> ClawdbotOAuthStore:
        """Replace the anthropic entry and write the merged store back."""
        store = await self.load()
        store.anthropic = token
        await self.save(store)
        return store
