"""
Value Objects for the Snapshot bounded context.

Value objects are immutable and defined by their attributes rather than identity.
They describe where an element is, what state it is in, and which
platform hooks identify it.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple, Union

Number = Union[int, float]


def as_number(value: Number) -> Number:
    """Collapse integral floats to int so 10.0 renders as 10."""
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def to_bool(value: Any, default: bool) -> bool:
    """Coerce booleans, "true"/"false" strings and 0/1 numbers; else ``default``."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        if value == "true":
            return True
        if value == "false":
            return False
        return default
    if isinstance(value, (int, float)):
        return value != 0
    return default


@dataclass(frozen=True)
class SnapshotId:
    """
    Unique identifier for a snapshot.

    A fresh random token per build; never derived from content.
    """
    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("SnapshotId value cannot be empty")

    @classmethod
    def generate(cls) -> "SnapshotId":
        """Generate a new unique snapshot ID."""
        return cls(value=str(uuid.uuid4()))

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"SnapshotId({self.value!r})"


@dataclass(frozen=True)
class Bounds:
    """
    Element rectangle in platform-native pixel coordinates.

    A width or height of zero or less marks a degenerate (invisible) element.
    """
    x: Number = 0
    y: Number = 0
    w: Number = 0
    h: Number = 0

    def __post_init__(self) -> None:
        for name in ("x", "y", "w", "h"):
            object.__setattr__(self, name, as_number(getattr(self, name)))

    @classmethod
    def empty(cls) -> "Bounds":
        return cls(0, 0, 0, 0)

    @property
    def is_degenerate(self) -> bool:
        return not (self.w > 0 and self.h > 0)

    @property
    def center(self) -> Tuple[int, int]:
        """Center point rounded half-up to integer coordinates."""
        return (_round_half_up(self.x + self.w / 2), _round_half_up(self.y + self.h / 2))

    def as_tuple(self) -> Tuple[Number, Number, Number, Number]:
        return (self.x, self.y, self.w, self.h)

    def to_dict(self) -> Dict[str, Number]:
        return {"x": self.x, "y": self.y, "w": self.w, "h": self.h}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Bounds":
        return cls(
            x=data.get("x", 0),
            y=data.get("y", 0),
            w=data.get("w", 0),
            h=data.get("h", 0),
        )


def _round_half_up(value: float) -> int:
    # round() rounds half to even; taps round half up.
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ElementStates:
    """Boolean element states with the defaults used when a dump omits one."""
    enabled: bool = True
    visible: bool = True
    focused: bool = False
    checked: bool = False

    def to_dict(self) -> Dict[str, bool]:
        return {
            "enabled": self.enabled,
            "visible": self.visible,
            "focused": self.focused,
            "checked": self.checked,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ElementStates":
        return cls(
            enabled=to_bool(data.get("enabled"), True),
            visible=to_bool(data.get("visible"), True),
            focused=to_bool(data.get("focused"), False),
            checked=to_bool(data.get("checked"), False),
        )


@dataclass(frozen=True)
class IosSelectors:
    """iOS identifying hooks: accessibility identifier and label."""
    id: Optional[str] = None
    label: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"id": self.id, "label": self.label}


@dataclass(frozen=True)
class AndroidSelectors:
    """Android identifying hooks from the uiautomator node attributes."""
    resource_id: Optional[str] = None
    content_desc: Optional[str] = None
    class_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "resource_id": self.resource_id,
            "content_desc": self.content_desc,
            "class": self.class_name,
        }


@dataclass(frozen=True)
class ElementSelectors:
    """
    Platform-specific identifying hooks.

    Both namespaces are always present; the namespace of the platform that
    did not produce the element has all fields set to None.
    """
    ios: IosSelectors = field(default_factory=IosSelectors)
    android: AndroidSelectors = field(default_factory=AndroidSelectors)

    def to_dict(self) -> Dict[str, Dict[str, Optional[str]]]:
        return {"ios": self.ios.to_dict(), "android": self.android.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ElementSelectors":
        ios = data.get("ios") or {}
        android = data.get("android") or {}
        return cls(
            ios=IosSelectors(id=ios.get("id"), label=ios.get("label")),
            android=AndroidSelectors(
                resource_id=android.get("resource_id"),
                content_desc=android.get("content_desc"),
                class_name=android.get("class"),
            ),
        )
