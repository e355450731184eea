"""Command-line construction for ``claude -p``."""

from clawbridge.runner.models import RunnerParams


def build_claude_args(params: RunnerParams) -> list[str]:
    """Build the argument list for a non-interactive claude run.

    ``--resume`` wins over ``--continue``. The prompt is always the last
    argument.
    """
    args: list[str] = ["-p", "--output-format", "json"]

    if params.model:
        args.extend(["--model", params.model])

    if params.system_prompt:
        args.extend(["--system-prompt", params.system_prompt])
    if params.append_system_prompt:
        args.extend(["--append-system-prompt", params.append_system_prompt])

    if params.resume_session_id:
        args.extend(["--resume", params.resume_session_id])
    elif params.continue_session:
        args.append("--continue")

    if params.allowed_tools:
        args.extend(["--allowed-tools", *params.allowed_tools])
    if params.disallowed_tools:
        args.extend(["--disallowed-tools", *params.disallowed_tools])

    if params.skip_permissions:
        args.append("--dangerously-skip-permissions")

    args.append(params.prompt)
    return args
