"""Platform parsers: raw accessibility payloads to canonical elements.

Each parser is a pure function returning elements in a deterministic
order with no refs assigned; the SnapshotBuilder assigns refs.
"""

from typing import Any, List

from mobiledevagent.domains.shared.kernel import Platform
from mobiledevagent.domains.snapshot.entities import CanonicalElement
from mobiledevagent.domains.snapshot.parsers.android import (
    parse_android_bounds,
    parse_android_uiautomator,
)
from mobiledevagent.domains.snapshot.parsers.ios import (
    normalize_ios_role,
    parse_ios_accessibility,
)


def parse_dump(platform: Platform, raw: Any, interactive_only: bool = False) -> List[CanonicalElement]:
    """Dispatch a raw dump to the parser for its platform.

    Args:
        platform: Platform that produced the dump
        raw: Decoded JSON value (iOS) or XML text (Android)
        interactive_only: Apply the platform's interactive filter

    Returns:
        Parsed elements without refs
    """
    if platform is Platform.IOS:
        return parse_ios_accessibility(raw, interactive_only=interactive_only)
    return parse_android_uiautomator(raw, interactive_only=interactive_only)


__all__ = [
    "parse_dump",
    "parse_ios_accessibility",
    "parse_android_uiautomator",
    "parse_android_bounds",
    "normalize_ios_role",
]
