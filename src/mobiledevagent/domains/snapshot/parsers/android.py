"""
Android uiautomator dump parsing.

Converts ``uiautomator dump`` XML into canonical elements. Every <node>
element is read in document order; only its attributes matter, so the
nesting of the hierarchy is not preserved.

This is the ONLY place where Android widget class names should be handled.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, List, Mapping, Union

from lxml import etree

from mobiledevagent.domains.shared.kernel import Role
from mobiledevagent.domains.snapshot.entities import CanonicalElement
from mobiledevagent.domains.snapshot.value_objects import (
    AndroidSelectors,
    Bounds,
    ElementSelectors,
    ElementStates,
)

logger = logging.getLogger(__name__)

BOUNDS_RE = re.compile(r"^\[([0-9]+),([0-9]+)\]\[([0-9]+),([0-9]+)\]$")

ANDROID_ROLES = {
    "android.widget.Button": Role.BUTTON,
    "android.widget.EditText": Role.TEXTBOX,
    "android.widget.CheckBox": Role.CHECKBOX,
    "android.widget.Switch": Role.SWITCH,
}


def parse_android_bounds(bounds: str) -> Bounds:
    """Parse the ``[l,t][r,b]`` bounds literal; malformed input yields zeros."""
    match = BOUNDS_RE.match(bounds or "")
    if not match:
        return Bounds.empty()
    left, top, right, bottom = map(int, match.groups())
    return Bounds(x=left, y=top, w=max(0, right - left), h=max(0, bottom - top))


def map_android_role(class_name: str) -> str:
    return ANDROID_ROLES.get(class_name, Role.UNKNOWN)


def _skip_leading_noise(data: bytes) -> bytes:
    """Drop tool output (adb or linker warnings) printed ahead of the document."""
    markers = (b"<?xml", b"<hierarchy", b"<node")
    starts = [i for i in (data.find(marker) for marker in markers) if i >= 0]
    return data[min(starts):] if starts else data


def iter_node_attributes(xml: Union[str, bytes]) -> Iterator[Mapping[str, str]]:
    """Yield the attribute map of every <node> element in document order.

    The parser recovers from truncated or slightly malformed dumps; input
    that cannot be parsed at all yields nothing.
    """
    if not xml or not xml.strip():
        return
    data = _skip_leading_noise(xml.encode("utf-8") if isinstance(xml, str) else xml)
    parser = etree.XMLParser(recover=True, resolve_entities=False, no_network=True, huge_tree=True)
    try:
        root = etree.fromstring(data, parser)
    except etree.XMLSyntaxError as exc:
        logger.warning("Unparseable uiautomator dump: %s", exc)
        return
    if root is None:
        logger.warning("Unparseable uiautomator dump: no root element")
        return
    for node in root.iter("node"):
        yield node.attrib


def _last_segment(value: str, separator: str) -> str:
    return value.split(separator)[-1] if value else ""


def canonicalize_android_node(attrs: Mapping[str, str]) -> CanonicalElement:
    """Build a canonical element from one node's attributes."""
    class_name = attrs.get("class") or ""
    text = (attrs.get("text") or "").strip()
    content_desc = (attrs.get("content-desc") or "").strip()
    resource_id = (attrs.get("resource-id") or "").strip()

    name = (
        text
        or content_desc
        or _last_segment(resource_id, "/")
        or _last_segment(class_name, ".")
        or ""
    )

    states = ElementStates(
        enabled=attrs.get("enabled") != "false",
        visible=attrs.get("visible-to-user") != "false",
        focused=attrs.get("focused") == "true",
        checked=attrs.get("checked") == "true",
    )

    return CanonicalElement(
        role=map_android_role(class_name),
        name=name,
        value=None,
        bounds=parse_android_bounds(attrs.get("bounds") or ""),
        states=states,
        selectors=ElementSelectors(
            android=AndroidSelectors(
                resource_id=resource_id or None,
                content_desc=content_desc or None,
                class_name=class_name or None,
            )
        ),
    )


def is_interactable(attrs: Mapping[str, str], element: CanonicalElement) -> bool:
    return (
        attrs.get("clickable") == "true"
        or attrs.get("focusable") == "true"
        or Role.is_interactive(element.role)
    )


def parse_android_uiautomator(xml: Union[str, bytes], interactive_only: bool = False) -> List[CanonicalElement]:
    """
    Parse a uiautomator XML dump into canonical elements (no refs yet).

    Args:
        xml: The dump text
        interactive_only: Keep only interactable nodes with non-degenerate bounds

    Returns:
        Elements in document order; empty for an empty or unparseable dump
    """
    elements: List[CanonicalElement] = []
    for attrs in iter_node_attributes(xml):
        element = canonicalize_android_node(attrs)
        if interactive_only:
            if not is_interactable(attrs, element) or element.bounds.is_degenerate:
                continue
        elements.append(element)

    logger.debug("Parsed uiautomator dump: %d elements", len(elements))
    return elements
