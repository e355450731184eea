"""Claude CLI runner configuration settings."""

from pydantic import BaseModel, Field


DEFAULT_CLAUDE_BINARY = "/opt/homebrew/bin/claude"
SESSION_MAP_FILE = ".claude-sessions.json"


class ClaudeCLISettings(BaseModel):
    """Settings for invoking the Claude Code CLI."""

    path: str | None = Field(
        default=None,
        description="Explicit path to the claude executable (CLAUDE_CLI_PATH wins over this)",
    )

    search_path: bool = Field(
        default=True,
        description="Look up 'claude' on PATH before falling back to default_binary",
    )

    default_binary: str = Field(
        default=DEFAULT_CLAUDE_BINARY,
        description="Executable used when nothing else resolves",
    )

    timeout: float = Field(
        default=600.0,
        gt=0.0,
        description="Default run timeout in seconds",
    )

    kill_grace_period: float = Field(
        default=5.0,
        ge=0.0,
        description="Seconds to wait after SIGTERM before sending SIGKILL",
    )

    session_map_file: str = Field(
        default=SESSION_MAP_FILE,
        description="Name of the per-workspace session map file",
    )
