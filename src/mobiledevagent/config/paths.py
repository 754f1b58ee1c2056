"""Session naming and on-disk layout of the state directory."""

from __future__ import annotations

import re
from pathlib import Path

from mobiledevagent.domains.shared.errors import InvalidSessionNameError

DEFAULT_SESSION = "default"
MAX_SESSION_NAME_LENGTH = 64
LAST_SNAPSHOT_FILENAME = "last_snapshot.json"

_SESSION_NAME_RE = re.compile(r"^[a-zA-Z0-9._-]+$")


def validate_session_name_syntax(session_name: str) -> str:
    """Check a session name without touching the filesystem.

    Raises:
        InvalidSessionNameError: If the name is empty, too long, or uses
            characters outside letters, numbers, ``.``, ``_`` and ``-``
    """
    name = str(session_name or "").strip()
    if not name:
        raise InvalidSessionNameError("Invalid --session (empty)")
    if len(name) > MAX_SESSION_NAME_LENGTH:
        raise InvalidSessionNameError(
            f"Invalid --session (too long; max {MAX_SESSION_NAME_LENGTH} chars)"
        )
    if "/" in name or "\\" in name or ".." in name:
        raise InvalidSessionNameError('Invalid --session (must not contain "/", "\\", or "..")')
    if not _SESSION_NAME_RE.match(name):
        raise InvalidSessionNameError("Invalid --session (allowed: letters, numbers, ., _, -)")
    return name


def validate_session_name(session_name: str, sessions_dir: Path) -> str:
    """Validate a session name and make sure it stays inside ``sessions_dir``."""
    name = validate_session_name_syntax(session_name)
    root = Path(sessions_dir).resolve()
    resolved = (root / name).resolve()
    if resolved == root or root not in resolved.parents:
        raise InvalidSessionNameError("Invalid --session (path escapes sessions directory)")
    return name


def session_dir(sessions_dir: Path, session_name: str) -> Path:
    return Path(sessions_dir) / validate_session_name(session_name, sessions_dir)


def last_snapshot_path(sessions_dir: Path, session_name: str) -> Path:
    return session_dir(sessions_dir, session_name) / LAST_SNAPSHOT_FILENAME
