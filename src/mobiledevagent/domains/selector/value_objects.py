"""Selector Domain Value Objects.

A selector is one of four addressing schemes an agent can use to point
at an element. The union is closed: every resolver branch handles exactly
these four types.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, Union

from mobiledevagent.domains.shared.kernel import ElementRef
from mobiledevagent.domains.snapshot.entities import CanonicalElement
from mobiledevagent.domains.snapshot.value_objects import Number, as_number


@dataclass(frozen=True)
class RefSelector:
    """``@e<N>`` - exact lookup of a ref in the snapshot.

    Examples:
        >>> RefSelector(ElementRef("e3"))
    """
    ref: ElementRef

    def render(self) -> str:
        return f"@{self.ref.value}"


@dataclass(frozen=True)
class CoordsSelector:
    """``coords:<x>,<y>`` - a raw tap point, no element involved."""
    x: Number
    y: Number

    def __post_init__(self) -> None:
        object.__setattr__(self, "x", as_number(self.x))
        object.__setattr__(self, "y", as_number(self.y))

    def render(self) -> str:
        return f"coords:{self.x},{self.y}"


@dataclass(frozen=True)
class TextSelector:
    """``text:"<v>"`` - exact match on the element name."""
    text: str

    def __post_init__(self) -> None:
        if not self.text:
            raise ValueError("TextSelector text cannot be empty")

    def render(self) -> str:
        return f"text:{json.dumps(self.text, ensure_ascii=False)}"


@dataclass(frozen=True)
class IdSelector:
    """``id:"<v>"`` - platform identifier match.

    Matches the iOS id first, then the iOS label, then the Android
    resource id, then the Android content description.
    """
    id: str

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("IdSelector id cannot be empty")

    def render(self) -> str:
        return f"id:{json.dumps(self.id, ensure_ascii=False)}"


ParsedSelector = Union[RefSelector, CoordsSelector, TextSelector, IdSelector]


def format_selector(selector: ParsedSelector) -> str:
    """Render a parsed selector back to its canonical token."""
    return selector.render()


@dataclass(frozen=True)
class CoordsTarget:
    """Tap point taken verbatim from a coords selector."""
    x: Number
    y: Number

    @property
    def kind(self) -> str:
        return "coords"

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, "x": self.x, "y": self.y}


@dataclass(frozen=True)
class ElementTarget:
    """A matched element and the integer center of its bounds."""
    element: CanonicalElement
    x: int
    y: int

    @classmethod
    def for_element(cls, element: CanonicalElement) -> "ElementTarget":
        x, y = element.center
        return cls(element=element, x=x, y=y)

    @property
    def kind(self) -> str:
        return "element"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "element": self.element.to_dict(),
            "x": self.x,
            "y": self.y,
        }


ResolvedTapTarget = Union[CoordsTarget, ElementTarget]
