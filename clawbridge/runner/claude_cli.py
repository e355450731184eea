"""Run the Claude Code CLI as a one-shot agent and collect its JSON result."""

import asyncio
import contextlib
import os
import signal
import time
from typing import Any

from clawbridge.config.settings import Settings, get_settings
from clawbridge.core.logging import get_logger
from clawbridge.runner.args import build_claude_args
from clawbridge.runner.exceptions import ClaudeCLIExitError, ClaudeCLISpawnError
from clawbridge.runner.models import Payload, RunMeta, RunnerParams, RunResult
from clawbridge.runner.output import parse_claude_output, summarize_usage
from clawbridge.runner.session_map import SessionMap
from clawbridge.utils.binary_resolver import resolve_claude_binary
from clawbridge.utils.paths import resolve_user_path


logger = get_logger(__name__)

ABORTED_TEXT = "[Claude CLI timed out or aborted]"
VERSION_CHECK_TIMEOUT = 10.0

# Signal the whole process group so tool subprocesses spawned by claude
# release the output pipes too.
_USE_PROCESS_GROUP = os.name == "posix"


def _send_signal(process: asyncio.subprocess.Process, sig: int) -> None:
    with contextlib.suppress(ProcessLookupError, PermissionError):
        if _USE_PROCESS_GROUP:
            os.killpg(process.pid, sig)
        elif process.returncode is None:
            process.send_signal(sig)


async def _terminate(
    process: asyncio.subprocess.Process,
    communicate: "asyncio.Future[tuple[bytes, bytes]]",
    grace_period: float,
) -> None:
    """SIGTERM the process, escalating to SIGKILL after the grace period."""
    _send_signal(process, signal.SIGTERM)
    try:
        await asyncio.wait_for(asyncio.shield(communicate), timeout=grace_period)
    except TimeoutError:
        logger.warning("claude_cli_kill", pid=process.pid, grace_period=grace_period)
        if _USE_PROCESS_GROUP:
            _send_signal(process, signal.SIGKILL)
        else:
            with contextlib.suppress(ProcessLookupError):
                process.kill()


async def _communicate(
    process: asyncio.subprocess.Process,
    timeout: float,
    abort_event: asyncio.Event | None,
    grace_period: float,
    log: Any,
) -> tuple[bytes, bytes, bool]:
    """Wait for the process while racing the timeout and the abort event.

    Returns:
        Tuple of (stdout, stderr, aborted)
    """
    communicate = asyncio.ensure_future(process.communicate())
    abort_wait: asyncio.Future[Any] | None = None
    aborted = False

    try:
        if abort_event is not None and abort_event.is_set():
            log.info("claude_cli_aborted", reason="abort_before_start")
            aborted = True
            await _terminate(process, communicate, grace_period)
        else:
            waiters: set[asyncio.Future[Any]] = {communicate}
            if abort_event is not None:
                abort_wait = asyncio.ensure_future(abort_event.wait())
                waiters.add(abort_wait)

            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
            if communicate not in done:
                aborted = True
                if abort_wait is not None and abort_wait in done:
                    log.info("claude_cli_aborted", reason="abort_signal")
                else:
                    log.warning("claude_cli_timeout", timeout=timeout)
                await _terminate(process, communicate, grace_period)

        stdout, stderr = await communicate

    except asyncio.CancelledError:
        log.info("claude_cli_cancelled")
        await _terminate(process, communicate, grace_period)
        if not communicate.done():
            communicate.cancel()
        raise

    finally:
        if abort_wait is not None and not abort_wait.done():
            abort_wait.cancel()

    return stdout, stderr, aborted


async def run_claude_cli_agent(
    params: RunnerParams,
    abort_event: asyncio.Event | None = None,
    settings: Settings | None = None,
) -> RunResult:
    """Run one claude turn in the caller's workspace.

    The CLI session id reported by claude is remembered per
    ``params.session_id`` in the workspace session map, and is passed as
    ``--resume`` on the next run for the same session.

    Args:
        params: Run parameters
        abort_event: Setting this event terminates the run early
        settings: Settings to use (global settings when omitted)

    Returns:
        RunResult; aborted and timed-out runs return a placeholder payload
        with ``meta.aborted`` set instead of raising

    Raises:
        ClaudeCLISpawnError: If the executable cannot be started
        ClaudeCLIExitError: If claude exits with a non-zero code
        ClaudeCLIParseError: If the output contains no result
    """
    settings = settings or get_settings()
    cli_settings = settings.claude_cli
    started = time.monotonic()

    workspace = resolve_user_path(params.workspace_dir)
    await asyncio.to_thread(workspace.mkdir, parents=True, exist_ok=True)

    session_map = SessionMap(workspace, cli_settings.session_map_file)
    await session_map.load()
    resume_session_id = session_map.get(params.session_id) or params.resume_session_id
    run_params = params.model_copy(update={"resume_session_id": resume_session_id})

    command = [*resolve_claude_binary(settings), *build_claude_args(run_params)]
    timeout = params.timeout or cli_settings.timeout

    log = logger.bind(run_id=params.run_id, session_id=params.session_id)
    log.debug("claude_cli_run_start", model=params.model or "default")
    log.debug("claude_cli_command", command=command, cwd=str(workspace))

    env = {**os.environ, "TERM": "dumb", "NO_COLOR": "1"}
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            cwd=workspace,
            env=env,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            start_new_session=_USE_PROCESS_GROUP,
        )
    except OSError as e:
        log.error("claude_cli_spawn_error", error=str(e), binary=command[0])
        raise ClaudeCLISpawnError(
            f"Failed to start Claude CLI at {command[0]}: {e}"
        ) from e

    stdout_bytes, stderr_bytes, aborted = await _communicate(
        process, timeout, abort_event, cli_settings.kill_grace_period, log
    )
    duration_ms = int((time.monotonic() - started) * 1000)
    stdout = stdout_bytes.decode("utf-8", errors="replace")
    stderr = stderr_bytes.decode("utf-8", errors="replace")

    if stderr and not aborted:
        log.warning("claude_cli_stderr", stderr=stderr)

    if aborted:
        return RunResult(
            payloads=[Payload(text=ABORTED_TEXT)],
            meta=RunMeta(duration_ms=duration_ms, aborted=True),
        )

    if process.returncode != 0:
        log.error("claude_cli_exit_error", returncode=process.returncode)
        raise ClaudeCLIExitError(process.returncode, stderr=stderr, stdout=stdout)

    result = parse_claude_output(stdout)
    if result.is_error:
        log.warning("claude_cli_result_error", subtype=result.subtype)

    if result.session_id:
        session_map.set(params.session_id, result.session_id)
        try:
            await session_map.save()
        except OSError as e:
            log.error(
                "session_map_save_failed",
                path=str(session_map.file_path),
                error=str(e),
            )

    summary = summarize_usage(result, params.model)

    log.debug(
        "claude_cli_done",
        duration_ms=duration_ms,
        cost_usd=result.total_cost_usd,
    )

    return RunResult(
        payloads=[Payload(text=result.result)] if result.result else None,
        meta=RunMeta(
            duration_ms=duration_ms,
            session_id=result.session_id,
            model=summary.model,
            cost_usd=result.total_cost_usd,
            usage=summary.usage,
            aborted=False,
        ),
    )


async def is_claude_cli_available(settings: Settings | None = None) -> bool:
    """Check whether ``claude --version`` runs successfully."""
    settings = settings or get_settings()
    command = [*resolve_claude_binary(settings), "--version"]

    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.debug("claude_cli_unavailable", command=command, error=str(e))
        return False

    try:
        await asyncio.wait_for(process.communicate(), timeout=VERSION_CHECK_TIMEOUT)
    except TimeoutError:
        logger.debug("claude_cli_version_timeout", command=command)
        with contextlib.suppress(ProcessLookupError):
            process.kill()
        await process.wait()
        return False

    return process.returncode == 0
