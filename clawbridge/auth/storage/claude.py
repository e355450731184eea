"""Claude Code CLI credentials file (the sync source)."""

from pydantic import ValidationError

from clawbridge.auth.exceptions import CredentialsInvalidError
from clawbridge.auth.models import ClaudeCredentials
from clawbridge.auth.storage.base import JsonCredentialStore
from clawbridge.core.logging import get_logger


logger = get_logger(__name__)


class ClaudeTokenStorage(JsonCredentialStore[ClaudeCredentials]):
    """The ``~/.claude/.credentials.json`` file maintained by the Claude CLI.

    The relay only reads it. ``save`` exists for tooling and tests.
    """

    async def load(self) -> ClaudeCredentials | None:
        """Read the CLI's credentials.

        Returns:
            Parsed credentials, or None if the file is missing or empty

        Raises:
            CredentialsInvalidError: If the file is not valid credentials JSON
            CredentialsStorageError: If the file cannot be read
        """
        logger.debug("claude_credentials_load", path=str(self.file_path))

        data = await self._read_json()
        if not data:
            return None

        try:
            credentials = ClaudeCredentials.model_validate(data)
        except ValidationError as e:
            logger.error(
                "claude_credentials_invalid", path=str(self.file_path), error=str(e)
            )
            raise CredentialsInvalidError(
                f"Invalid Claude credentials in {self.file_path}: {e}"
            ) from e

        logger.debug(
            "claude_credentials_loaded",
            has_oauth=credentials.claude_ai_oauth is not None,
        )
        return credentials

    async def save(self, credentials: ClaudeCredentials) -> bool:
        await self._write_json(
            credentials.model_dump(by_alias=True, mode="json", exclude_none=True)
        )
        return True
