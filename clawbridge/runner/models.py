"""Data models for Claude CLI runs."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class RunnerParams(BaseModel):
    """Parameters for a single Claude CLI agent run."""

    session_id: str = Field(..., description="Caller-side conversation id")
    session_key: str | None = None
    workspace_dir: Path = Field(..., description="Working directory for the CLI")
    prompt: str
    run_id: str
    model: str | None = None
    timeout: float | None = Field(
        default=None,
        gt=0.0,
        description="Run timeout in seconds (settings default when unset)",
    )
    system_prompt: str | None = None
    append_system_prompt: str | None = None
    continue_session: bool = False
    resume_session_id: str | None = None
    allowed_tools: list[str] = Field(default_factory=list)
    disallowed_tools: list[str] = Field(default_factory=list)
    skip_permissions: bool = False


class Payload(BaseModel):
    """A reply chunk delivered back to the caller."""

    text: str | None = None
    media_url: str | None = None
    media_urls: list[str] | None = None


class Usage(BaseModel):
    """Aggregated token usage for a run."""

    input: int = 0
    output: int = 0
    cache_read: int = 0
    cache_write: int = 0


class RunMeta(BaseModel):
    """Metadata about a finished run."""

    duration_ms: int
    session_id: str | None = None
    model: str | None = None
    cost_usd: float | None = None
    usage: Usage | None = None
    aborted: bool = False


class RunResult(BaseModel):
    """Result returned to the caller of a Claude CLI run."""

    payloads: list[Payload] | None = None
    meta: RunMeta


class ResultUsage(BaseModel):
    """Top-level usage block of the CLI result."""

    model_config = ConfigDict(extra="allow")

    input_tokens: int | None = None
    output_tokens: int | None = None
    cache_read_input_tokens: int | None = None
    cache_creation_input_tokens: int | None = None


class ModelUsage(BaseModel):
    """Per-model usage entry of the CLI result."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    input_tokens: int | None = Field(None, alias="inputTokens")
    output_tokens: int | None = Field(None, alias="outputTokens")
    cache_read_input_tokens: int | None = Field(None, alias="cacheReadInputTokens")
    cache_creation_input_tokens: int | None = Field(
        None, alias="cacheCreationInputTokens"
    )


class ClaudeJsonResult(BaseModel):
    """The ``type: result`` message printed by ``claude -p --output-format json``."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    type: str | None = None
    subtype: str | None = None
    is_error: bool = False
    duration_ms: int | None = None
    result: str | None = None
    session_id: str | None = None
    total_cost_usd: float | None = None
    usage: ResultUsage | None = None
    model_usage: dict[str, ModelUsage] | None = Field(None, alias="modelUsage")
