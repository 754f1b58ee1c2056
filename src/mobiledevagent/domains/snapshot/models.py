"""Structural schema for persisted snapshots.

A snapshot read back from storage is untrusted input: it may have been
written by an older version, truncated, or edited by hand. The pydantic
models below are the shape check applied before a stored payload is
turned back into a UISnapshot. Unknown keys are tolerated; known keys
must carry the right types down to each element's bounds and states.
"""

from __future__ import annotations

import math
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictFloat,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)

from mobiledevagent.domains.shared.errors import InvalidSnapshotError

Coordinate = Union[StrictInt, StrictFloat]


class BoundsPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    x: Coordinate = 0
    y: Coordinate = 0
    w: Coordinate = 0
    h: Coordinate = 0

    @field_validator("x", "y", "w", "h")
    @classmethod
    def _finite(cls, value: Union[int, float]) -> Union[int, float]:
        if not math.isfinite(value):
            raise ValueError("must be a finite number")
        return value


class StatesPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    enabled: StrictBool = True
    visible: StrictBool = True
    focused: StrictBool = False
    checked: StrictBool = False


class IosSelectorsPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: Optional[StrictStr] = None
    label: Optional[StrictStr] = None


class AndroidSelectorsPayload(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    resource_id: Optional[StrictStr] = None
    content_desc: Optional[StrictStr] = None
    class_name: Optional[StrictStr] = Field(default=None, alias="class")


class SelectorsPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    ios: IosSelectorsPayload = Field(default_factory=IosSelectorsPayload)
    android: AndroidSelectorsPayload = Field(default_factory=AndroidSelectorsPayload)


class ElementPayload(BaseModel):
    """Stored form of one canonical element."""

    model_config = ConfigDict(extra="allow")

    ref: StrictStr = Field(min_length=1)
    role: StrictStr = "unknown"
    name: StrictStr = ""
    value: Optional[StrictStr] = None
    bounds: BoundsPayload = Field(default_factory=BoundsPayload)
    states: StatesPayload = Field(default_factory=StatesPayload)
    selectors: SelectorsPayload = Field(default_factory=SelectorsPayload)

    def to_element_dict(self) -> Dict[str, Any]:
        """Known fields only, in the element serialization shape."""
        return {
            "ref": self.ref,
            "role": self.role,
            "name": self.name,
            "value": self.value,
            "bounds": {"x": self.bounds.x, "y": self.bounds.y, "w": self.bounds.w, "h": self.bounds.h},
            "states": {
                "enabled": self.states.enabled,
                "visible": self.states.visible,
                "focused": self.states.focused,
                "checked": self.states.checked,
            },
            "selectors": {
                "ios": {"id": self.selectors.ios.id, "label": self.selectors.ios.label},
                "android": {
                    "resource_id": self.selectors.android.resource_id,
                    "content_desc": self.selectors.android.content_desc,
                    "class": self.selectors.android.class_name,
                },
            },
        }


class SnapshotPayload(BaseModel):
    """Minimum shape a stored snapshot must have to be usable."""

    model_config = ConfigDict(extra="allow")

    snapshot_id: StrictStr = Field(min_length=1)
    taken_at: StrictStr = Field(min_length=1)
    platform: Literal["ios", "android"]
    device_id: Optional[StrictStr]
    app_id: Optional[StrictStr]
    tree: StrictStr
    elements: List[ElementPayload]
    refs: Dict[str, Any]


def parse_snapshot_payload(payload: Any) -> SnapshotPayload:
    """Validate a decoded snapshot document.

    Args:
        payload: The decoded JSON value

    Returns:
        The validated SnapshotPayload

    Raises:
        InvalidSnapshotError: If the payload does not have the snapshot shape
    """
    if not isinstance(payload, dict):
        raise InvalidSnapshotError(details=[f"expected an object, got {type(payload).__name__}"])
    try:
        return SnapshotPayload.model_validate(payload)
    except ValidationError as exc:
        details = [
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        ]
        raise InvalidSnapshotError(details=details) from exc
