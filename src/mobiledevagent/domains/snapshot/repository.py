"""
Repository Interface for the Snapshot bounded context.

The core only needs two operations on snapshot storage: read the most
recent snapshot of a session (or None) and overwrite it. The interface is
a Protocol so the command layer can inject any backend; no history of
superseded snapshots is kept.
"""

from __future__ import annotations

import json
import logging
import secrets
from pathlib import Path
from typing import Dict, List, Optional, Protocol, runtime_checkable

from mobiledevagent.config.paths import last_snapshot_path, validate_session_name_syntax
from mobiledevagent.domains.shared.errors import InvalidSnapshotError

from .aggregates import UISnapshot
from .events import SnapshotStored

logger = logging.getLogger(__name__)


@runtime_checkable
class SnapshotStore(Protocol):
    """
    Storage contract for the latest snapshot of each session.
    """

    def read_latest(self, session: str) -> Optional[UISnapshot]:
        """
        Retrieve the most recent snapshot for a session.

        Args:
            session: The session name

        Returns:
            The latest UISnapshot, None if the session has none

        Raises:
            InvalidSnapshotError: If the stored snapshot is malformed
        """
        ...

    def write_latest(self, session: str, snapshot: UISnapshot) -> None:
        """
        Replace the latest snapshot for a session.

        Args:
            session: The session name
            snapshot: The snapshot that supersedes the previous one
        """
        ...


class InMemorySnapshotStore:
    """
    In-memory implementation of SnapshotStore.

    Useful for testing and for short-lived sessions where
    persistence is not required.
    """

    def __init__(self) -> None:
        self._latest: Dict[str, UISnapshot] = {}
        self._events: List[SnapshotStored] = []

    def read_latest(self, session: str) -> Optional[UISnapshot]:
        return self._latest.get(validate_session_name_syntax(session))

    def write_latest(self, session: str, snapshot: UISnapshot) -> None:
        name = validate_session_name_syntax(session)
        self._latest[name] = snapshot
        self._events.append(SnapshotStored(snapshot_id=snapshot.snapshot_id, session=name))

    def get_pending_events(self) -> List[SnapshotStored]:
        events = list(self._events)
        self._events.clear()
        return events

    def clear(self) -> None:
        """Clear all snapshots (for testing)."""
        self._latest.clear()

    def __len__(self) -> int:
        return len(self._latest)

    def __contains__(self, session: str) -> bool:
        return session in self._latest


class FileSnapshotStore:
    """
    JSON-file implementation of SnapshotStore.

    Each session keeps ``<sessions_dir>/<session>/last_snapshot.json``.
    Writes go to a temp file in the same directory and are renamed into
    place, so readers never observe a half-written snapshot.
    """

    def __init__(self, sessions_dir: Path) -> None:
        self.sessions_dir = Path(sessions_dir)

    def path_for(self, session: str) -> Path:
        return last_snapshot_path(self.sessions_dir, session)

    def read_latest(self, session: str) -> Optional[UISnapshot]:
        path = self.path_for(session)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise InvalidSnapshotError(details=[f"{path}: {exc}"]) from exc
        if not raw.strip():
            return None
        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InvalidSnapshotError(details=[f"{path}: {exc}"]) from exc
        return UISnapshot.from_dict(payload)

    def write_latest(self, session: str, snapshot: UISnapshot) -> None:
        path = self.path_for(session)
        path.parent.mkdir(parents=True, exist_ok=True)

        temp_path = path.with_name(f".{path.name}.tmp.{secrets.token_hex(6)}")
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(snapshot.to_dict(), f, indent=2, ensure_ascii=False)
            f.write("\n")
        temp_path.replace(path)

        event = SnapshotStored(
            snapshot_id=snapshot.snapshot_id, session=path.parent.name, location=str(path)
        )
        logger.debug("Domain event: %s", event.to_dict())
