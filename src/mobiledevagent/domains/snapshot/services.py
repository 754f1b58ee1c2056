"""
Domain Services for the Snapshot bounded context.

The SnapshotBuilder turns an ordered list of parsed elements into a
UISnapshot: it assigns refs, renders the human-readable tree and stamps
the snapshot metadata.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from mobiledevagent.domains.shared.kernel import ElementRef, Platform
from mobiledevagent.domains.snapshot.aggregates import UISnapshot
from mobiledevagent.domains.snapshot.entities import CanonicalElement
from mobiledevagent.domains.snapshot.events import SnapshotCaptured
from mobiledevagent.domains.snapshot.value_objects import SnapshotId

logger = logging.getLogger(__name__)


def assign_refs(
    elements: Iterable[CanonicalElement],
) -> Tuple[List[CanonicalElement], Dict[str, CanonicalElement]]:
    """
    Assign sequential refs in input order.

    ``e1`` is always the first element the parser produced; the order
    of the input is the addressing contract and is never changed here.

    Args:
        elements: Parsed elements without refs

    Returns:
        Tuple of (ref'd elements, ref -> element index)
    """
    assigned: List[CanonicalElement] = []
    refs: Dict[str, CanonicalElement] = {}
    for position, element in enumerate(elements, start=1):
        ref = ElementRef.from_index(position)
        with_ref = element.with_ref(ref)
        assigned.append(with_ref)
        refs[ref.value] = with_ref
    return assigned, refs


def render_tree(elements: Iterable[CanonicalElement]) -> str:
    """
    Render one display line per element.

    Format: ``@<ref> [<role>] "<name>" (<x>,<y>,<w>,<h>)``. Names are
    quoted as JSON string literals. For display only; never parsed back.
    """
    lines = []
    for element in elements:
        b = element.bounds
        ref = element.ref.value if element.ref else ""
        name = json.dumps(element.name or "", ensure_ascii=False)
        lines.append(f"@{ref} [{element.role}] {name} ({b.x},{b.y},{b.w},{b.h})")
    return "\n".join(lines)


class SnapshotBuilder:
    """
    Service that packages parsed elements into an immutable UISnapshot.

    The clock and id factory are injectable so tests can pin them; by
    default every build gets a fresh UUID and the current UTC time.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], SnapshotId]] = None,
    ) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._id_factory = id_factory or SnapshotId.generate
        self._events: List[SnapshotCaptured] = []

    def build(
        self,
        elements: Iterable[CanonicalElement],
        platform: Platform,
        device_id: Optional[str] = None,
        app_id: Optional[str] = None,
    ) -> UISnapshot:
        """
        Build a snapshot from parsed elements.

        Args:
            elements: Parser output, in parser order
            platform: Platform the dump came from
            device_id: Device identifier, if known
            app_id: App bundle/package identifier, if known

        Returns:
            The new UISnapshot
        """
        assigned, refs = assign_refs(elements)
        snapshot = UISnapshot(
            snapshot_id=self._id_factory(),
            taken_at=self._clock(),
            platform=platform,
            device_id=device_id,
            app_id=app_id,
            tree=render_tree(assigned),
            elements=tuple(assigned),
            refs=refs,
        )

        event = SnapshotCaptured(
            snapshot_id=snapshot.snapshot_id,
            platform=platform.value,
            element_count=len(assigned),
            device_id=device_id,
            app_id=app_id,
        )
        self._events.append(event)
        logger.debug("Domain event: %s", event.to_dict())
        return snapshot

    def get_pending_events(self) -> List[SnapshotCaptured]:
        """Return and clear the events emitted since the last call."""
        events = list(self._events)
        self._events.clear()
        return events
