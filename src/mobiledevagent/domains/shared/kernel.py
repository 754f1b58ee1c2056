"""Shared Kernel - Core domain types shared across bounded contexts.

These types are intentionally minimal and shared between:
- Snapshot Context (produces ElementRef, Platform, Role)
- Selector Context (resolves ElementRef against a snapshot)
- Retention Context (timestamps of run directories)

Keep this module free of dump parsing and persistence.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import FrozenSet, Optional


class Platform(str, Enum):
    """Platforms a snapshot can originate from."""

    IOS = "ios"
    ANDROID = "android"

    @classmethod
    def from_string(cls, value: str) -> "Platform":
        """Create a Platform from a string value.

        Args:
            value: The platform name (case-insensitive)

        Returns:
            The matching Platform

        Raises:
            ValueError: If the platform name is not recognized
        """
        normalized = (value or "").lower().strip()
        for platform in cls:
            if platform.value == normalized:
                return platform
        raise ValueError(
            f"Unknown platform: '{value}'. "
            f"Valid platforms: {[p.value for p in cls]}"
        )


@dataclass(frozen=True)
class ElementRef:
    """Short reference to an element (e1, e2, etc.).

    Refs are assigned per snapshot in element order, starting at e1.
    They are not stable across snapshots.

    Format: "e{number}"
    """
    value: str

    REF_PATTERN: str = field(default=r"^e[0-9]+$", init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Validate ref format on creation."""
        if not isinstance(self.value, str) or not re.match(self.REF_PATTERN, self.value):
            raise ValueError(
                f"Invalid ElementRef format: '{self.value}'. "
                f"Must match pattern 'e{{number}}' (e.g., e1, e42)"
            )

    @classmethod
    def from_index(cls, index: int) -> "ElementRef":
        """Create an ElementRef from a 1-based element position.

        Args:
            index: The element position (must be at least 1)

        Returns:
            ElementRef with value "e{index}"

        Raises:
            ValueError: If index is below 1
        """
        if index < 1:
            raise ValueError(f"Element index must be at least 1, got {index}")
        return cls(value=f"e{index}")

    @classmethod
    def is_valid(cls, value: str) -> bool:
        """Check whether a string is a well-formed ref without raising."""
        return isinstance(value, str) and re.match(r"^e[0-9]+$", value) is not None

    def to_index(self) -> int:
        """Extract the numeric index from the ref (e.g., e42 -> 42)."""
        return int(self.value[1:])

    def __str__(self) -> str:
        return self.value

    def __hash__(self) -> int:
        return hash(self.value)


class Role:
    """Normalized semantic roles shared by both platforms.

    Parsers may also emit a lowercase platform token when none of the
    known categories match; only the constants below are interactive.
    """

    BUTTON: str = "button"
    TEXTBOX: str = "textbox"
    LINK: str = "link"
    CHECKBOX: str = "checkbox"
    SWITCH: str = "switch"
    UNKNOWN: str = "unknown"

    INTERACTIVE_ROLES: FrozenSet[str] = frozenset({
        "button", "textbox", "link", "checkbox", "switch",
    })

    @classmethod
    def is_interactive(cls, role: str) -> bool:
        """Check if a role represents an interactive element.

        Args:
            role: The normalized role string to check

        Returns:
            True if the role is one of the interactive categories
        """
        return role in cls.INTERACTIVE_ROLES


def format_timestamp(moment: datetime) -> str:
    """Render an instant as UTC ISO-8601 with millisecond precision and Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 instant; naive values are taken as UTC. None if unparseable."""
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        moment = datetime.fromisoformat(text)
    except ValueError:
        return None
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment
