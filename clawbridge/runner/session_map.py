"""Per-workspace mapping from caller session ids to Claude CLI session ids."""

import asyncio
import contextlib
import json
from pathlib import Path

from clawbridge.config.claude import SESSION_MAP_FILE
from clawbridge.core.logging import get_logger


logger = get_logger(__name__)


class SessionMap:
    """JSON-backed ``{session_id: claude_session_id}`` map in a workspace.

    Loading never fails: a missing or corrupt file yields an empty map.
    """

    def __init__(self, workspace_dir: Path, filename: str = SESSION_MAP_FILE):
        self.file_path = Path(workspace_dir) / filename
        self._entries: dict[str, str] = {}

    async def load(self) -> dict[str, str]:
        """Load the map from disk, replacing any in-memory entries."""

        def read_file() -> dict[str, str]:
            with self.file_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            return {str(k): str(v) for k, v in data.items() if isinstance(v, str)}

        try:
            self._entries = await asyncio.to_thread(read_file)
        except FileNotFoundError:
            self._entries = {}
        except (OSError, ValueError) as e:
            logger.debug(
                "session_map_unreadable", path=str(self.file_path), error=str(e)
            )
            self._entries = {}
        return dict(self._entries)

    async def save(self) -> None:
        """Write the map atomically.

        Raises:
            OSError: If the file cannot be written
        """
        temp_path = self.file_path.with_suffix(".tmp")
        payload = json.dumps(self._entries, indent=2)

        def write_file() -> None:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(payload, encoding="utf-8")
            temp_path.replace(self.file_path)

        try:
            await asyncio.to_thread(write_file)
        finally:
            if temp_path.exists():
                with contextlib.suppress(OSError):
                    temp_path.unlink()

        logger.debug(
            "session_map_saved", path=str(self.file_path), entries=len(self._entries)
        )

    def get(self, session_id: str) -> str | None:
        return self._entries.get(session_id)

    def set(self, session_id: str, claude_session_id: str) -> None:
        self._entries[session_id] = claude_session_id

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)
