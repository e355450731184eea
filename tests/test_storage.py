"""Tests for the JSON credential stores."""

import json
import os
import stat
from pathlib import Path

import pytest

from clawbridge.auth.exceptions import CredentialsInvalidError
from clawbridge.auth.models import ClawdbotToken
from clawbridge.auth.storage import ClaudeTokenStorage, ClawdbotOAuthStorage


class TestClaudeTokenStorage:
    """Test reading the Claude CLI credentials file."""

    async def test_load_missing_file_returns_none(self, tmp_path: Path):
        """Test that a missing file loads as None."""
        storage = ClaudeTokenStorage(tmp_path / "missing.json")
        assert await storage.load() is None
        assert not await storage.exists()

    async def test_load_valid_file(
        self, claude_credentials_path: Path, write_claude_credentials
    ):
        """Test loading a valid credentials file."""
        data = write_claude_credentials()
        storage = ClaudeTokenStorage(claude_credentials_path)

        credentials = await storage.load()

        assert credentials is not None
        assert credentials.claude_ai_oauth is not None
        assert (
            credentials.claude_ai_oauth.access_token
            == data["claudeAiOauth"]["accessToken"]
        )

    async def test_load_invalid_json_raises(self, tmp_path: Path):
        """Test that malformed JSON raises CredentialsInvalidError."""
        path = tmp_path / "creds.json"
        path.write_text("{not json")

        with pytest.raises(CredentialsInvalidError):
            await ClaudeTokenStorage(path).load()

    async def test_load_invalid_schema_raises(self, tmp_path: Path):
        """Test that a token without required fields is rejected."""
        path = tmp_path / "creds.json"
        path.write_text(json.dumps({"claudeAiOauth": {"accessToken": "a"}}))

        with pytest.raises(CredentialsInvalidError):
            await ClaudeTokenStorage(path).load()


class TestClawdbotOAuthStorage:
    """Test the Clawdbot OAuth store."""

    async def test_update_creates_directory_and_file(self, tmp_path: Path):
        """Test first write creates owner-only directory and file."""
        path = tmp_path / "clawdbot" / "credentials" / "oauth.json"
        storage = ClawdbotOAuthStorage(path)

        await storage.update_anthropic(
            ClawdbotToken(access="a", refresh="r", expires=123)
        )

        assert json.loads(path.read_text()) == {
            "anthropic": {"access": "a", "refresh": "r", "expires": 123}
        }
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert stat.S_IMODE(path.parent.stat().st_mode) == 0o700

    async def test_output_is_indented_with_trailing_newline(self, tmp_path: Path):
        """Test the file format matches what Clawdbot writes."""
        path = tmp_path / "oauth.json"
        storage = ClawdbotOAuthStorage(path)

        await storage.update_anthropic(
            ClawdbotToken(access="a", refresh="r", expires=1)
        )

        text = path.read_text()
        assert text.endswith("}\n")
        assert '\n  "anthropic": {\n    "access": "a",' in text
        assert not path.with_suffix(".tmp").exists()

    async def test_update_preserves_other_keys(self, tmp_path: Path):
        """Test that other providers in the store are kept."""
        path = tmp_path / "oauth.json"
        path.write_text(
            json.dumps(
                {
                    "openai": {"access": "o", "refresh": "p", "expires": 5},
                    "anthropic": {"access": "old", "refresh": "old", "expires": 1},
                }
            )
        )

        await ClawdbotOAuthStorage(path).update_anthropic(
            ClawdbotToken(access="new", refresh="new-r", expires=9)
        )

        data = json.loads(path.read_text())
        assert data["openai"] == {"access": "o", "refresh": "p", "expires": 5}
        assert data["anthropic"] == {"access": "new", "refresh": "new-r", "expires": 9}

    @pytest.mark.parametrize(
        "bad_entry",
        [
            {"access": "old"},
            {"access": "old", "refresh": None, "expires": 1},
            {"access": "old", "refresh": "r", "expires": 1.5},
        ],
    )
    async def test_invalid_anthropic_entry_keeps_other_providers(
        self, tmp_path: Path, bad_entry: dict
    ):
        """Test that a malformed anthropic entry only replaces that entry."""
        path = tmp_path / "oauth.json"
        openai = {"access": "o", "refresh": "p", "expires": 5}
        path.write_text(json.dumps({"openai": openai, "anthropic": bad_entry}))
        storage = ClawdbotOAuthStorage(path)

        store = await storage.load()
        assert store.anthropic is None
        assert store.model_extra == {"openai": openai}

        await storage.update_anthropic(
            ClawdbotToken(access="new", refresh="r", expires=9)
        )

        assert json.loads(path.read_text()) == {
            "openai": openai,
            "anthropic": {"access": "new", "refresh": "r", "expires": 9},
        }

    async def test_every_created_directory_is_owner_only(self, tmp_path: Path):
        """Test that missing ancestors are created as 0700 too."""
        path = tmp_path / "home" / ".clawdbot" / "credentials" / "oauth.json"

        await ClawdbotOAuthStorage(path).update_anthropic(
            ClawdbotToken(access="a", refresh="r", expires=1)
        )

        for directory in (path.parent, path.parent.parent, tmp_path / "home"):
            assert stat.S_IMODE(directory.stat().st_mode) == 0o700

    async def test_temp_file_is_private_before_tokens_are_written(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ):
        """Test that token bytes never land in a group or world readable file."""
        modes: list[int] = []
        real_fdopen = os.fdopen

        def recording_fdopen(fd, *args, **kwargs):
            modes.append(stat.S_IMODE(os.fstat(fd).st_mode))
            return real_fdopen(fd, *args, **kwargs)

        monkeypatch.setattr(os, "fdopen", recording_fdopen)
        old_umask = os.umask(0o022)
        try:
            await ClawdbotOAuthStorage(tmp_path / "oauth.json").update_anthropic(
                ClawdbotToken(access="a", refresh="r", expires=1)
            )
        finally:
            os.umask(old_umask)

        assert modes
        assert set(modes) == {0o600}

    async def test_corrupt_store_is_replaced(self, tmp_path: Path):
        """Test that an unparsable store is treated as empty."""
        path = tmp_path / "oauth.json"
        path.write_text("garbage{")
        storage = ClawdbotOAuthStorage(path)

        store = await storage.load()
        assert store.anthropic is None

        await storage.update_anthropic(
            ClawdbotToken(access="a", refresh="r", expires=1)
        )
        assert json.loads(path.read_text()) == {
            "anthropic": {"access": "a", "refresh": "r", "expires": 1}
        }

    async def test_delete(self, tmp_path: Path):
        """Test deleting the store file."""
        path = tmp_path / "oauth.json"
        storage = ClawdbotOAuthStorage(path)
        assert await storage.delete() is False

        await storage.update_anthropic(
            ClawdbotToken(access="a", refresh="r", expires=1)
        )
        assert await storage.delete() is True
        assert not path.exists()
        assert storage.get_location() == str(path)
