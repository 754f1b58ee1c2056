"""
Aggregates for the Snapshot bounded context.

UISnapshot is the aggregate root: an immutable, ordered list of canonical
elements plus the ref index over them and the metadata describing where
the dump came from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from mobiledevagent.domains.shared.errors import InvalidSnapshotError
from mobiledevagent.domains.shared.kernel import Platform, format_timestamp, parse_timestamp
from mobiledevagent.domains.snapshot.entities import CanonicalElement
from mobiledevagent.domains.snapshot.models import parse_snapshot_payload
from mobiledevagent.domains.snapshot.value_objects import SnapshotId

# Refs older than this are considered stale by default (5 minutes)
DEFAULT_STALE_SECONDS = 300


@dataclass(frozen=True, eq=False)
class UISnapshot:
    """
    Aggregate root for UI snapshots.

    Invariants:
    - every element carries a ref, and refs are unique
    - ``refs`` is exactly the inverse index of ``elements`` by ref
    - the snapshot is never mutated after it is built; a new snapshot
      supersedes it instead
    """
    snapshot_id: SnapshotId
    taken_at: datetime
    platform: Platform
    device_id: Optional[str]
    app_id: Optional[str]
    tree: str
    elements: Tuple[CanonicalElement, ...] = ()
    refs: Mapping[str, CanonicalElement] = field(default_factory=dict)

    def __post_init__(self) -> None:
        elements = tuple(self.elements)
        index: Dict[str, CanonicalElement] = {}
        for element in elements:
            if element.ref is None:
                raise ValueError("Snapshot elements must have refs assigned")
            if element.ref.value in index:
                raise ValueError(f"Duplicate ref in snapshot: {element.ref.value}")
            index[element.ref.value] = element
        if self.refs and set(self.refs) != set(index):
            raise ValueError("Snapshot refs must be the inverse index of its elements")
        object.__setattr__(self, "elements", elements)
        object.__setattr__(self, "refs", MappingProxyType(index))

    @property
    def element_count(self) -> int:
        return len(self.elements)

    def get(self, ref: str) -> Optional[CanonicalElement]:
        """Exact ref lookup; returns None on a miss."""
        return self.refs.get(ref)

    def age_seconds(self, now: Optional[datetime] = None) -> float:
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return (now - self.taken_at).total_seconds()

    def is_stale(
        self,
        now: Optional[datetime] = None,
        max_age_seconds: float = DEFAULT_STALE_SECONDS,
    ) -> bool:
        """Check whether refs from this snapshot should no longer be trusted.

        Args:
            now: Current time (defaults to the wall clock, UTC)
            max_age_seconds: Staleness threshold

        Returns:
            True if the snapshot is older than the threshold
        """
        return self.age_seconds(now) > max_age_seconds

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-serializable snapshot document."""
        elements = [element.to_dict() for element in self.elements]
        return {
            "snapshot_id": str(self.snapshot_id),
            "taken_at": format_timestamp(self.taken_at),
            "platform": self.platform.value,
            "device_id": self.device_id,
            "app_id": self.app_id,
            "tree": self.tree,
            "elements": elements,
            "refs": {item["ref"]: item for item in elements},
        }

    @classmethod
    def from_dict(cls, payload: Any) -> "UISnapshot":
        """Rebuild a snapshot from a stored document.

        Args:
            payload: The decoded JSON document

        Returns:
            The reconstructed UISnapshot

        Raises:
            InvalidSnapshotError: If the document fails the shape check or
                its elements do not form a consistent ref index
        """
        data = parse_snapshot_payload(payload)
        taken_at = parse_timestamp(data.taken_at)
        if taken_at is None:
            raise InvalidSnapshotError(details=[f"taken_at: not an ISO-8601 instant: {data.taken_at!r}"])
        try:
            elements: Sequence[CanonicalElement] = [
                CanonicalElement.from_dict(item.to_element_dict()) for item in data.elements
            ]
            return cls(
                snapshot_id=SnapshotId(data.snapshot_id),
                taken_at=taken_at,
                platform=Platform.from_string(data.platform),
                device_id=data.device_id,
                app_id=data.app_id,
                tree=data.tree,
                elements=tuple(elements),
            )
        except (TypeError, ValueError) as exc:
            raise InvalidSnapshotError(details=[str(exc)]) from exc

    def __repr__(self) -> str:
        return (
            f"UISnapshot(id={self.snapshot_id}, platform={self.platform.value}, "
            f"elements={len(self.elements)})"
        )
