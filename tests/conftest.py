"""Shared test fixtures for clawbridge tests.

Fixtures point every store and binary at a temporary directory so no
test touches the real ~/.claude or ~/.clawdbot files.
"""

import json
import os
import stat
from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest

from clawbridge.config.claude import ClaudeCLISettings
from clawbridge.config.oauth import PathSettings
from clawbridge.config.settings import Settings, get_settings
from clawbridge.core.logging import setup_logging


def pytest_configure(config: pytest.Config) -> None:
    """Configure logging once for the whole run."""
    setup_logging(json_logs=False, log_level_name="DEBUG")


@pytest.fixture(autouse=True)
def isolated_environment(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Generator[Path, None, None]:
    """Isolate HOME, the working directory and clawbridge env variables."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.delenv("CLAUDE_CLI_PATH", raising=False)
    for key in list(os.environ):
        if key.upper().startswith("CLAWBRIDGE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield home_dir
    get_settings.cache_clear()


@pytest.fixture
def claude_credentials_path(tmp_path: Path) -> Path:
    return tmp_path / "home" / ".claude" / ".credentials.json"


@pytest.fixture
def clawdbot_oauth_path(tmp_path: Path) -> Path:
    return tmp_path / "home" / ".clawdbot" / "credentials" / "oauth.json"


@pytest.fixture
def fake_claude_path(tmp_path: Path) -> Path:
    return tmp_path / "bin" / "claude"


@pytest.fixture
def test_settings(
    claude_credentials_path: Path,
    clawdbot_oauth_path: Path,
    fake_claude_path: Path,
) -> Settings:
    """Settings wired to temporary stores and a fake claude binary."""
    return Settings(
        paths=PathSettings(
            claude_credentials=claude_credentials_path,
            clawdbot_oauth=clawdbot_oauth_path,
        ),
        claude_cli=ClaudeCLISettings(
            search_path=False,
            default_binary=str(fake_claude_path),
            timeout=30.0,
            kill_grace_period=1.0,
        ),
    )


def ms_from_now(delta: timedelta) -> int:
    return int((datetime.now(UTC) + delta).timestamp() * 1000)


@pytest.fixture
def write_claude_credentials(
    claude_credentials_path: Path,
) -> Callable[..., dict[str, Any]]:
    """Write a Claude CLI credentials file and return its contents."""

    def _write(
        expires_in: timedelta = timedelta(hours=1),
        access_token: str = "sk-ant-oat01-access",
        refresh_token: str = "sk-ant-ort01-refresh",
    ) -> dict[str, Any]:
        data = {
            "claudeAiOauth": {
                "accessToken": access_token,
                "refreshToken": refresh_token,
                "expiresAt": ms_from_now(expires_in),
                "scopes": ["user:inference", "user:profile"],
                "subscriptionType": "max",
            }
        }
        claude_credentials_path.parent.mkdir(parents=True, exist_ok=True)
        claude_credentials_path.write_text(json.dumps(data))
        return data

    return _write


@pytest.fixture
def make_fake_claude(fake_claude_path: Path) -> Callable[[str], Path]:
    """Write an executable shell script standing in for the claude CLI.

    The script records its arguments, working directory and terminal
    environment next to itself before running ``body``.
    """

    def _make(body: str) -> Path:
        fake_claude_path.parent.mkdir(parents=True, exist_ok=True)
        script = (
            "#!/bin/sh\n"
            'here="$(dirname "$0")"\n'
            "printf '%s\\n' \"$@\" > \"$here/args.txt\"\n"
            'pwd > "$here/cwd.txt"\n'
            'echo "$TERM $NO_COLOR" > "$here/env.txt"\n'
            f"{body}\n"
        )
        fake_claude_path.write_text(script)
        fake_claude_path.chmod(
            fake_claude_path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP
        )
        return fake_claude_path

    return _make
