"""Filesystem path helpers."""

from pathlib import Path


def resolve_user_path(path: str | Path) -> Path:
    """Expand ``~`` and make the path absolute without requiring it to exist."""
    return Path(path).expanduser().resolve()
