"""
Domain Events for the Snapshot bounded context.

Events describe something that happened to a snapshot. They are logged
at debug level and returned to callers that want to observe the core.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from .value_objects import SnapshotId


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SnapshotCaptured:
    """
    Emitted when a new snapshot is built from a parsed dump.
    """
    snapshot_id: SnapshotId
    platform: str
    element_count: int
    device_id: Optional[str] = None
    app_id: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def event_type(self) -> str:
        return "snapshot.captured"

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type,
            "snapshot_id": str(self.snapshot_id),
            "platform": self.platform,
            "element_count": self.element_count,
            "device_id": self.device_id,
            "app_id": self.app_id,
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class SnapshotStored:
    """
    Emitted when a snapshot replaces the latest snapshot of a session.
    """
    snapshot_id: SnapshotId
    session: str
    location: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)

    @property
    def event_type(self) -> str:
        return "snapshot.stored"

    def to_dict(self) -> dict:
        return {
            "event_type": self.event_type,
            "snapshot_id": str(self.snapshot_id),
            "session": self.session,
            "location": self.location,
            "timestamp": self.timestamp.isoformat(),
        }
