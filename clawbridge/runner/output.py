"""Parsing of ``claude --output-format json`` output."""

import json
from typing import Any, NamedTuple

from pydantic import ValidationError

from clawbridge.core.logging import get_logger
from clawbridge.runner.exceptions import ClaudeCLIParseError
from clawbridge.runner.models import ClaudeJsonResult, Usage


logger = get_logger(__name__)

LOG_PREVIEW_CHARS = 500


class UsageSummary(NamedTuple):
    """Token totals and the model they are attributed to."""

    usage: Usage
    model: str


def _find_result_line(stdout: str) -> dict[str, Any] | None:
    for line in reversed(stdout.strip().splitlines()):
        try:
            parsed = json.loads(line)
        except ValueError:
            continue
        if isinstance(parsed, dict) and parsed.get("type") == "result":
            return parsed
    return None


def parse_claude_output(stdout: str) -> ClaudeJsonResult:
    """Extract the result message from claude's stdout.

    The last line that decodes to a ``type: result`` object wins. If no such
    line exists, the whole output is decoded as one JSON document.

    Raises:
        ClaudeCLIParseError: If no result can be decoded
    """
    try:
        data = _find_result_line(stdout)
        if data is None:
            data = json.loads(stdout)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        return ClaudeJsonResult.model_validate(data)
    except (ValueError, ValidationError) as e:
        logger.error(
            "claude_output_parse_failed", stdout=stdout[:LOG_PREVIEW_CHARS]
        )
        raise ClaudeCLIParseError(f"Failed to parse Claude CLI output: {e}") from e


def summarize_usage(
    result: ClaudeJsonResult, fallback_model: str | None = None
) -> UsageSummary:
    """Sum top-level and per-model token usage.

    The primary model is the first ``modelUsage`` key, falling back to the
    requested model and finally ``"unknown"``.
    """
    top = result.usage
    usage = Usage(
        input=(top.input_tokens or 0) if top else 0,
        output=(top.output_tokens or 0) if top else 0,
        cache_read=(top.cache_read_input_tokens or 0) if top else 0,
        cache_write=(top.cache_creation_input_tokens or 0) if top else 0,
    )
    model = fallback_model or "unknown"

    if result.model_usage:
        model = next(iter(result.model_usage))
        for entry in result.model_usage.values():
            usage.input += entry.input_tokens or 0
            usage.output += entry.output_tokens or 0
            usage.cache_read += entry.cache_read_input_tokens or 0
            usage.cache_write += entry.cache_creation_input_tokens or 0

    return UsageSummary(usage=usage, model=model)
