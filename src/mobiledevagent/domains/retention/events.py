"""Retention Domain Events.

Emitted by the executor for each run directory it acts on.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RunDeleted:
    """A run directory was removed."""
    dir: str
    size_bytes: int
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def event_type(self) -> str:
        return "retention.run_deleted"

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type,
            "dir": self.dir,
            "size_bytes": self.size_bytes,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class RunDeletionSkipped:
    """A planned deletion was skipped because the directory changed or vanished.

    reason is "missing" or "changed".
    """
    dir: str
    reason: str
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def event_type(self) -> str:
        return "retention.run_deletion_skipped"

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type,
            "dir": self.dir,
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
        }
