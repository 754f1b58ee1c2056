"""Snapshot Bounded Context for mobile-dev-agent.

Turns raw platform accessibility dumps into one canonical, addressable
element model.

Key Components:
- parse_ios_accessibility / parse_android_uiautomator: platform parsers
- SnapshotBuilder: assigns refs and renders the tree
- UISnapshot: aggregate root (elements + ref index + metadata)
- SnapshotStore: latest-snapshot-per-session storage contract

Example Usage:
    from mobiledevagent.domains.snapshot import (
        FileSnapshotStore,
        SnapshotBuilder,
        parse_ios_accessibility,
    )
    from mobiledevagent.domains.shared import Platform

    elements = parse_ios_accessibility(raw_json, interactive_only=True)
    snapshot = SnapshotBuilder().build(elements, Platform.IOS, device_id=udid)
    FileSnapshotStore(sessions_dir).write_latest("default", snapshot)
"""

from mobiledevagent.domains.snapshot.aggregates import DEFAULT_STALE_SECONDS, UISnapshot
from mobiledevagent.domains.snapshot.entities import CanonicalElement
from mobiledevagent.domains.snapshot.events import SnapshotCaptured, SnapshotStored
from mobiledevagent.domains.snapshot.models import SnapshotPayload, parse_snapshot_payload
from mobiledevagent.domains.snapshot.parsers import (
    parse_android_uiautomator,
    parse_dump,
    parse_ios_accessibility,
)
from mobiledevagent.domains.snapshot.repository import (
    FileSnapshotStore,
    InMemorySnapshotStore,
    SnapshotStore,
)
from mobiledevagent.domains.snapshot.services import SnapshotBuilder, assign_refs, render_tree
from mobiledevagent.domains.snapshot.value_objects import (
    AndroidSelectors,
    Bounds,
    ElementSelectors,
    ElementStates,
    IosSelectors,
    SnapshotId,
)

__all__ = [
    # Value Objects
    "AndroidSelectors",
    "Bounds",
    "ElementSelectors",
    "ElementStates",
    "IosSelectors",
    "SnapshotId",
    # Entities
    "CanonicalElement",
    # Aggregates
    "DEFAULT_STALE_SECONDS",
    "UISnapshot",
    # Schema
    "SnapshotPayload",
    "parse_snapshot_payload",
    # Domain Events
    "SnapshotCaptured",
    "SnapshotStored",
    # Parsers
    "parse_android_uiautomator",
    "parse_dump",
    "parse_ios_accessibility",
    # Repository
    "FileSnapshotStore",
    "InMemorySnapshotStore",
    "SnapshotStore",
    # Domain Services
    "SnapshotBuilder",
    "assign_refs",
    "render_tree",
]
