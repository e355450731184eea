"""Command-line entry point for clawbridge."""

import asyncio
import contextlib
import signal
import sys
import uuid
from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from clawbridge._version import __version__
from clawbridge.auth.exceptions import CredentialsError
from clawbridge.auth.sync import CredentialSyncService, SyncResult
from clawbridge.config.settings import ConfigurationError, Settings, get_settings
from clawbridge.core.logging import setup_logging
from clawbridge.runner.claude_cli import is_claude_cli_available, run_claude_cli_agent
from clawbridge.runner.exceptions import ClaudeCLIError
from clawbridge.runner.models import RunnerParams, RunResult
from clawbridge.utils.binary_resolver import resolve_claude_binary


app = typer.Typer(
    name="clawbridge",
    help="Relay Claude CLI OAuth credentials to Clawdbot and run Claude CLI turns.",
    rich_markup_mode="rich",
    add_completion=False,
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"clawbridge {__version__}")
        raise typer.Exit()


def _settings(ctx: typer.Context) -> Settings:
    settings = ctx.obj.get("settings") if ctx.obj else None
    return settings if settings is not None else get_settings()


@app.callback()
def app_main(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file (TOML)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Override the configured log level"),
    ] = None,
) -> None:
    """Claude CLI credential relay and agent runner."""
    try:
        settings = Settings.from_config(config)
    except ConfigurationError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1) from e

    level = log_level or settings.logging.level
    log_format = settings.logging.format
    json_logs = log_format == "json" or (
        log_format == "auto" and not sys.stderr.isatty()
    )
    setup_logging(json_logs=json_logs, log_level_name=level)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@app.command("sync-oauth")
def sync_oauth(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Refresh even if the token is still valid"),
    ] = False,
) -> None:
    """Sync OAuth credentials from the Claude Code CLI to Clawdbot."""
    service = CredentialSyncService(settings=_settings(ctx))

    try:
        result: SyncResult = asyncio.run(service.sync(force=force))
    except CredentialsError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    expiry = result.token.expires_at_datetime.isoformat()
    if result.refreshed:
        console.print(f"Token refreshed, new expiry: {expiry}")
    else:
        console.print(f"Token valid until {expiry}")
    console.print(f"Synced to {result.target}")


async def _run_with_interrupt(params: RunnerParams, settings: Settings) -> RunResult:
    """Run the agent, turning Ctrl-C into an abort of the claude process."""
    abort_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    # Signal handlers are unavailable on Windows event loops
    with contextlib.suppress(NotImplementedError, RuntimeError):
        loop.add_signal_handler(signal.SIGINT, abort_event.set)
    try:
        return await run_claude_cli_agent(params, abort_event, settings=settings)
    finally:
        with contextlib.suppress(NotImplementedError, RuntimeError):
            loop.remove_signal_handler(signal.SIGINT)


@app.command("run")
def run(
    ctx: typer.Context,
    prompt: Annotated[str, typer.Argument(help="Prompt to send to Claude")],
    session_id: Annotated[
        str, typer.Option("--session-id", "-s", help="Caller session id")
    ],
    workspace: Annotated[
        Path, typer.Option("--workspace", "-w", help="Workspace directory")
    ] = Path("."),
    model: Annotated[str | None, typer.Option("--model", "-m")] = None,
    timeout: Annotated[
        float | None, typer.Option("--timeout", "-t", help="Timeout in seconds")
    ] = None,
    system_prompt: Annotated[str | None, typer.Option("--system-prompt")] = None,
    append_system_prompt: Annotated[
        str | None, typer.Option("--append-system-prompt")
    ] = None,
    continue_session: Annotated[bool, typer.Option("--continue")] = False,
    resume: Annotated[
        str | None, typer.Option("--resume", help="Claude session id to resume")
    ] = None,
    allowed_tools: Annotated[
        list[str] | None, typer.Option("--allowed-tool", help="Repeatable")
    ] = None,
    disallowed_tools: Annotated[
        list[str] | None, typer.Option("--disallowed-tool", help="Repeatable")
    ] = None,
    skip_permissions: Annotated[bool, typer.Option("--skip-permissions")] = False,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the full run result as JSON")
    ] = False,
) -> None:
    """Run one Claude CLI agent turn and print the reply."""
    settings = _settings(ctx)
    try:
        params = RunnerParams(
            session_id=session_id,
            workspace_dir=workspace,
            prompt=prompt,
            run_id=uuid.uuid4().hex,
            model=model,
            timeout=timeout,
            system_prompt=system_prompt,
            append_system_prompt=append_system_prompt,
            continue_session=continue_session,
            resume_session_id=resume,
            allowed_tools=allowed_tools or [],
            disallowed_tools=disallowed_tools or [],
            skip_permissions=skip_permissions,
        )
    except ValidationError as e:
        err_console.print(f"[red]Invalid run parameters:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e

    try:
        result = asyncio.run(_run_with_interrupt(params, settings))
    except ClaudeCLIError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e

    if as_json:
        console.print_json(result.model_dump_json(exclude_none=True))
    else:
        for payload in result.payloads or []:
            if payload.text:
                console.print(payload.text, markup=False, highlight=False)

    if result.meta.aborted:
        raise typer.Exit(130)


@app.command("check-cli")
def check_cli(ctx: typer.Context) -> None:
    """Check that the Claude CLI binary can be executed."""
    settings = _settings(ctx)
    binary = " ".join(resolve_claude_binary(settings))

    if asyncio.run(is_claude_cli_available(settings)):
        console.print(f"[green]Claude CLI available:[/green] {binary}")
        return

    err_console.print(f"[red]Claude CLI not available:[/red] {binary}")
    raise typer.Exit(1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
