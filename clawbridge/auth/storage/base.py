"""JSON file backed credential stores."""

import asyncio
import contextlib
import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from clawbridge.auth.exceptions import CredentialsInvalidError, CredentialsStorageError
from clawbridge.core.logging import get_logger


logger = get_logger(__name__)

CredentialsT = TypeVar("CredentialsT", bound=BaseModel)

DIR_MODE = 0o700
FILE_MODE = 0o600


def _read_object(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise CredentialsInvalidError(
            f"Expected a JSON object in {path}, got {type(data).__name__}"
        )
    return data


def _make_private_dirs(directory: Path) -> None:
    """Create ``directory`` and any missing ancestors, each as 0700."""
    missing = [d for d in (directory, *directory.parents) if not d.exists()]
    for d in reversed(missing):
        d.mkdir(mode=DIR_MODE, exist_ok=True)


def _write_object(path: Path, data: dict[str, Any]) -> None:
    """Replace ``path`` with ``data`` through an owner-only temp file."""
    _make_private_dirs(path.parent)

    payload = json.dumps(data, indent=2) + "\n"
    temp_path = path.with_suffix(".tmp")
    try:
        fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        # A stale temp file keeps its old mode through O_CREAT
        os.fchmod(fd, FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
        temp_path.replace(path)
    finally:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)


class JsonCredentialStore(ABC, Generic[CredentialsT]):
    """A credentials file on disk, parsed into a pydantic model.

    Subclasses decide how raw JSON maps to their model in ``load`` and
    ``save``; this class owns the file handling. Blocking I/O runs in a
    worker thread.
    """

    def __init__(self, file_path: Path):
        self.file_path = file_path

    @abstractmethod
    async def load(self) -> CredentialsT | None:
        """Load credentials, or None when there are none."""

    @abstractmethod
    async def save(self, credentials: CredentialsT) -> bool:
        """Persist credentials, returning True on success."""

    async def _read_json(self) -> dict[str, Any]:
        """Read the file as a JSON object.

        Returns:
            The parsed object, or an empty dict if the file is missing

        Raises:
            CredentialsInvalidError: If the content is not a JSON object
            CredentialsStorageError: If the file cannot be read
        """
        try:
            return await asyncio.to_thread(_read_object, self.file_path)
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error("json_decode_error", path=str(self.file_path), error=str(e))
            raise CredentialsInvalidError(
                f"Invalid JSON in {self.file_path}: {e}"
            ) from e
        except OSError as e:
            logger.error("file_read_error", path=str(self.file_path), error=str(e))
            raise CredentialsStorageError(f"Error reading {self.file_path}: {e}") from e

    async def _write_json(self, data: dict[str, Any]) -> None:
        """Write a JSON object atomically with 0600 permissions.

        Raises:
            CredentialsStorageError: If the data cannot be encoded or written
        """
        try:
            await asyncio.to_thread(_write_object, self.file_path, data)
        except (TypeError, ValueError) as e:
            raise CredentialsStorageError(f"Failed to encode JSON: {e}") from e
        except OSError as e:
            logger.error("file_write_error", path=str(self.file_path), error=str(e))
            raise CredentialsStorageError(f"Error writing {self.file_path}: {e}") from e

        logger.debug("json_write_success", path=str(self.file_path))

    async def exists(self) -> bool:
        return await asyncio.to_thread(self.file_path.is_file)

    async def delete(self) -> bool:
        """Remove the file.

        Returns:
            True if a file was removed, False if there was none
        """
        try:
            await asyncio.to_thread(self.file_path.unlink)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise CredentialsStorageError(
                f"Error deleting {self.file_path}: {e}"
            ) from e
        logger.debug("file_deleted", path=str(self.file_path))
        return True

    def get_location(self) -> str:
        return str(self.file_path)
