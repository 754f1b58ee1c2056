"""Snapshot domain entities - the canonical element."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Tuple

from mobiledevagent.domains.shared.kernel import ElementRef, Role
from mobiledevagent.domains.snapshot.value_objects import (
    Bounds,
    ElementSelectors,
    ElementStates,
)


@dataclass(frozen=True)
class CanonicalElement:
    """Platform-agnostic normalized representation of one UI node.

    Parsers produce elements without a ref. The SnapshotBuilder assigns
    refs once ordering is final; a ref'd element is the unit agents address.

    Entity Identity: the ElementRef, within a single snapshot only.
    """
    role: str
    name: str
    value: Optional[str] = None
    bounds: Bounds = field(default_factory=Bounds.empty)
    states: ElementStates = field(default_factory=ElementStates)
    selectors: ElementSelectors = field(default_factory=ElementSelectors)
    ref: Optional[ElementRef] = None

    @property
    def is_interactive(self) -> bool:
        """Interactive role with a non-degenerate rectangle."""
        return Role.is_interactive(self.role) and not self.bounds.is_degenerate

    @property
    def center(self) -> Tuple[int, int]:
        return self.bounds.center

    def dedup_key(self) -> Tuple[Any, ...]:
        """Identity used to collapse repeated nodes in recursive dumps."""
        return (self.role, self.name, self.selectors.ios.id or "", self.bounds.as_tuple())

    def with_ref(self, ref: ElementRef) -> "CanonicalElement":
        """Return a copy of this element carrying the given ref."""
        return replace(self, ref=ref)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the JSON-serializable element shape."""
        return {
            "ref": self.ref.value if self.ref else None,
            "role": self.role,
            "name": self.name,
            "value": self.value,
            "bounds": self.bounds.to_dict(),
            "states": self.states.to_dict(),
            "selectors": self.selectors.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CanonicalElement":
        """Rebuild an element from its serialized form.

        Raises:
            ValueError: If the stored ref is malformed
        """
        ref = data.get("ref")
        return cls(
            role=str(data.get("role") or Role.UNKNOWN),
            name=str(data.get("name") or ""),
            value=data.get("value"),
            bounds=Bounds.from_dict(data.get("bounds") or {}),
            states=ElementStates.from_dict(data.get("states") or {}),
            selectors=ElementSelectors.from_dict(data.get("selectors") or {}),
            ref=ElementRef(ref) if ref else None,
        )
