"""
iOS accessibility dump parsing.

Converts the nested JSON graph emitted by the simulator accessibility tool
(``axe describe-ui``) into canonical elements. The graph has no fixed
schema: children may hang off any of several keys, and role, label and
frame information appears under different names across tool versions.

This is the ONLY place where iOS attribute names (AXRole, AXLabel, ...)
should be handled.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Iterator, List, Mapping, Optional, Set, Tuple

from mobiledevagent.domains.shared.kernel import Role
from mobiledevagent.domains.snapshot.entities import CanonicalElement
from mobiledevagent.domains.snapshot.parsers.accessors import (
    first_string,
    sub_mapping,
    to_bool,
    to_number,
)
from mobiledevagent.domains.snapshot.value_objects import (
    Bounds,
    ElementSelectors,
    ElementStates,
    IosSelectors,
)

logger = logging.getLogger(__name__)

CHILD_KEYS = ("children", "elements", "nodes", "subviews", "descendants")

ROLE_KEYS = ("role", "AXRole", "type", "elementType", "class", "AXElementType")
NAME_KEYS = ("name", "label", "AXLabel", "title", "identifier", "valueLabel")
ID_KEYS = ("id", "identifier", "AXIdentifier", "accessibilityIdentifier")
LABEL_KEYS = ("label", "AXLabel", "title", "accessibilityLabel", "name")
VALUE_KEYS = ("value", "AXValue", "valueLabel")
FRAME_KEYS = ("frame", "bounds", "rect")


def iter_nodes(raw: Any) -> Iterator[Mapping[str, Any]]:
    """Depth-first, order-preserving walk over every mapping in ``raw``.

    Lists are visited item by item; a mapping is yielded before its
    children, which are taken from each key in CHILD_KEYS in turn.
    """
    stack: List[Any] = [raw]
    while stack:
        value = stack.pop()
        if isinstance(value, list):
            stack.extend(reversed(value))
            continue
        if not isinstance(value, Mapping):
            continue
        yield value
        pending = [value[key] for key in CHILD_KEYS if key in value]
        stack.extend(reversed(pending))


def normalize_ios_role(raw_role: str) -> str:
    """
    Normalize an iOS role/type string to a canonical role.

    Matching is a case-insensitive substring test, so "AXButton",
    "Button" and "XCUIElementTypeButton" all map to "button". Unknown
    roles are lowercased with whitespace collapsed to underscores.

    Args:
        raw_role: Role, type or traits string from the dump

    Returns:
        Canonical role, or "unknown" for an empty input
    """
    lower = (raw_role or "").strip().lower()
    if "button" in lower:
        return Role.BUTTON
    if any(token in lower for token in ("textfield", "text field", "textview", "text view")):
        return Role.TEXTBOX
    if "link" in lower:
        return Role.LINK
    if "checkbox" in lower:
        return Role.CHECKBOX
    if "switch" in lower:
        return Role.SWITCH
    return re.sub(r"\s+", "_", lower) or Role.UNKNOWN


def extract_bounds(node: Mapping[str, Any]) -> Bounds:
    """Read the element rectangle from the first of frame/bounds/rect present.

    Accepts {x,y,w,h}, {left,top,width,height} and {left,top,right,bottom};
    width and height are derived from right/bottom when not given.
    """
    rect: Optional[Mapping[str, Any]] = None
    for key in FRAME_KEYS:
        rect = sub_mapping(node, key)
        if rect is not None:
            break
    if rect is None:
        return Bounds.empty()

    x = to_number(rect.get("x"), to_number(rect.get("left"), 0))
    y = to_number(rect.get("y"), to_number(rect.get("top"), 0))
    w = to_number(rect.get("w"), to_number(rect.get("width"), to_number(rect.get("right"), 0) - x))
    h = to_number(rect.get("h"), to_number(rect.get("height"), to_number(rect.get("bottom"), 0) - y))
    return Bounds(x=x, y=y, w=w, h=h)


def canonicalize_ios_node(node: Mapping[str, Any]) -> Optional[CanonicalElement]:
    """Turn one visited node into a canonical element.

    Returns None for pure layout noise: a node with no role, name,
    label or identifier.
    """
    role_raw = first_string(node, ROLE_KEYS)
    if role_raw is None:
        traits = node.get("traits")
        role_raw = traits if isinstance(traits, str) else None
    name = first_string(node, NAME_KEYS)
    element_id = first_string(node, ID_KEYS)
    label = first_string(node, LABEL_KEYS)
    value = first_string(node, VALUE_KEYS)

    if not role_raw and not name and not label and not element_id:
        return None

    checked_default = to_bool(node.get("selected"), False)
    states = ElementStates(
        enabled=to_bool(node.get("enabled"), True),
        visible=to_bool(node.get("visible"), True),
        focused=to_bool(node.get("focused"), False),
        checked=to_bool(node.get("checked"), checked_default),
    )

    return CanonicalElement(
        role=normalize_ios_role(role_raw) if role_raw else Role.UNKNOWN,
        name=(name or label or element_id or "").strip(),
        value=value,
        bounds=extract_bounds(node),
        states=states,
        selectors=ElementSelectors(ios=IosSelectors(id=element_id, label=label)),
    )


def dedupe_elements(elements: List[CanonicalElement]) -> List[CanonicalElement]:
    """Collapse repeats sharing (role, name, ios id, bounds); first seen wins."""
    seen: Set[Tuple[Any, ...]] = set()
    unique: List[CanonicalElement] = []
    for element in elements:
        key = element.dedup_key()
        if key in seen:
            continue
        seen.add(key)
        unique.append(element)
    return unique


def parse_ios_accessibility(raw: Any, interactive_only: bool = False) -> List[CanonicalElement]:
    """
    Parse an iOS accessibility dump into canonical elements (no refs yet).

    Args:
        raw: Decoded JSON value (object or array) from the accessibility tool
        interactive_only: Keep only interactive roles with non-degenerate bounds

    Returns:
        Elements in traversal order; empty when nothing is recognizable
    """
    candidates: List[CanonicalElement] = []
    for node in iter_nodes(raw):
        element = canonicalize_ios_node(node)
        if element is not None:
            candidates.append(element)

    elements = dedupe_elements(candidates)
    logger.debug(
        "Parsed iOS dump: %d candidates, %d after dedupe", len(candidates), len(elements)
    )

    if not interactive_only:
        return elements
    return [element for element in elements if element.is_interactive]
