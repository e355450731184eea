"""Resolution of the claude executable."""

import os
import shutil
from typing import TYPE_CHECKING, NamedTuple

import structlog


if TYPE_CHECKING:
    from clawbridge.config.settings import Settings

logger = structlog.get_logger(__name__)

CLAUDE_CLI_PATH_ENV = "CLAUDE_CLI_PATH"


class BinaryCommand(NamedTuple):
    """Represents a resolved binary command."""

    command: list[str]
    source: str  # "env", "settings", "path" or "default"


class BinaryResolver:
    """Resolves the claude binary from the environment, settings or PATH."""

    def __init__(
        self,
        configured_path: str | None = None,
        search_path: bool = True,
        default_binary: str = "claude",
    ):
        """Initialize the binary resolver.

        Args:
            configured_path: Explicit path from settings
            search_path: Whether to look the binary up on PATH
            default_binary: Executable used when nothing else resolves
        """
        self.configured_path = configured_path
        self.search_path = search_path
        self.default_binary = default_binary

    def find_binary(self, binary_name: str = "claude") -> BinaryCommand:
        """Find the binary to execute.

        Order: ``CLAUDE_CLI_PATH``, the configured path, PATH lookup, then the
        default binary.
        """
        env_path = os.environ.get(CLAUDE_CLI_PATH_ENV)
        if env_path:
            logger.debug("binary_from_env", binary=binary_name, path=env_path)
            return BinaryCommand(command=[env_path], source="env")

        if self.configured_path:
            logger.debug(
                "binary_from_settings", binary=binary_name, path=self.configured_path
            )
            return BinaryCommand(command=[self.configured_path], source="settings")

        if self.search_path:
            direct_path = shutil.which(binary_name)
            if direct_path:
                logger.debug(
                    "binary_found_directly", binary=binary_name, path=direct_path
                )
                return BinaryCommand(command=[direct_path], source="path")

        logger.debug(
            "binary_using_default", binary=binary_name, path=self.default_binary
        )
        return BinaryCommand(command=[self.default_binary], source="default")

    @classmethod
    def from_settings(cls, settings: "Settings") -> "BinaryResolver":
        """Create a BinaryResolver from application settings."""
        return cls(
            configured_path=settings.claude_cli.path,
            search_path=settings.claude_cli.search_path,
            default_binary=settings.claude_cli.default_binary,
        )


def resolve_claude_binary(settings: "Settings") -> list[str]:
    """Convenience function returning the command list for claude."""
    return BinaryResolver.from_settings(settings).find_binary("claude").command
