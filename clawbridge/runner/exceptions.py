"""Exceptions raised by the Claude CLI runner."""


class ClaudeCLIError(Exception):
    """Base exception for Claude CLI invocation errors."""

    pass


class ClaudeCLISpawnError(ClaudeCLIError):
    """Raised when the claude executable cannot be started."""

    pass


class ClaudeCLIExitError(ClaudeCLIError):
    """Raised when the claude process exits with a non-zero code."""

    def __init__(self, returncode: int | None, stderr: str = "", stdout: str = ""):
        self.returncode = returncode
        self.stderr = stderr
        self.stdout = stdout
        super().__init__(
            f"Claude CLI exited with code {returncode}: {stderr or stdout}"
        )


class ClaudeCLIParseError(ClaudeCLIError):
    """Raised when the claude output contains no usable result."""

    pass
