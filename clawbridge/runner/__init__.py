"""Claude Code CLI runner."""

from clawbridge.runner.args import build_claude_args
from clawbridge.runner.claude_cli import (
    ABORTED_TEXT,
    is_claude_cli_available,
    run_claude_cli_agent,
)
from clawbridge.runner.exceptions import (
    ClaudeCLIError,
    ClaudeCLIExitError,
    ClaudeCLIParseError,
    ClaudeCLISpawnError,
)
from clawbridge.runner.models import (
    ClaudeJsonResult,
    Payload,
    RunMeta,
    RunnerParams,
    RunResult,
    Usage,
)
from clawbridge.runner.output import parse_claude_output, summarize_usage
from clawbridge.runner.session_map import SessionMap


__all__ = [
    "run_claude_cli_agent",
    "is_claude_cli_available",
    "build_claude_args",
    "parse_claude_output",
    "summarize_usage",
    "SessionMap",
    "ABORTED_TEXT",
    # Models
    "RunnerParams",
    "RunResult",
    "RunMeta",
    "Payload",
    "Usage",
    "ClaudeJsonResult",
    # Exceptions
    "ClaudeCLIError",
    "ClaudeCLIExitError",
    "ClaudeCLIParseError",
    "ClaudeCLISpawnError",
]
