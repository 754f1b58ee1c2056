"""Selector Domain Services.

Parsing turns a raw selector token into a ParsedSelector; resolution
maps a ParsedSelector onto a snapshot and yields a tap target. Both are
pure functions of their inputs.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime
from typing import Callable, Optional

from mobiledevagent.domains.shared.errors import NoMatchingElementError, SelectorSyntaxError
from mobiledevagent.domains.shared.kernel import ElementRef
from mobiledevagent.domains.snapshot.aggregates import DEFAULT_STALE_SECONDS, UISnapshot
from mobiledevagent.domains.snapshot.entities import CanonicalElement

from .value_objects import (
    CoordsSelector,
    CoordsTarget,
    ElementTarget,
    IdSelector,
    ParsedSelector,
    RefSelector,
    ResolvedTapTarget,
    TextSelector,
    format_selector,
)

logger = logging.getLogger(__name__)

REF_PREFIX = "@"
COORDS_PREFIX = "coords:"
TEXT_PREFIX = "text:"
ID_PREFIX = "id:"

_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


def parse_selector_token(token: str) -> ParsedSelector:
    """Parse a selector token.

    Grammar::

        @e<N>            ref
        coords:<x>,<y>   raw tap point
        text:"<v>"       exact element name (quotes optional)
        id:"<v>"         platform id (quotes optional)

    Raises:
        SelectorSyntaxError: If the token is empty or matches no form
    """
    t = (token or "").strip()
    if not t:
        raise SelectorSyntaxError("Empty selector", token=token or "")

    if t.startswith(REF_PREFIX):
        ref = t[len(REF_PREFIX):]
        if not ElementRef.is_valid(ref):
            raise SelectorSyntaxError(f"Invalid ref selector: {token}", token=token)
        return RefSelector(ElementRef(ref))

    if t.startswith(COORDS_PREFIX):
        parts = t[len(COORDS_PREFIX):].split(",")
        if len(parts) != 2:
            raise SelectorSyntaxError(f"Invalid coords selector: {token}", token=token)
        x = _parse_coordinate(parts[0])
        y = _parse_coordinate(parts[1])
        if x is None or y is None:
            raise SelectorSyntaxError(f"Invalid coords selector: {token}", token=token)
        return CoordsSelector(x, y)

    if t.startswith(TEXT_PREFIX):
        value = _strip_quotes(t[len(TEXT_PREFIX):])
        if not value:
            raise SelectorSyntaxError(f"Invalid text selector: {token}", token=token)
        return TextSelector(value)

    if t.startswith(ID_PREFIX):
        value = _strip_quotes(t[len(ID_PREFIX):])
        if not value:
            raise SelectorSyntaxError(f"Invalid id selector: {token}", token=token)
        return IdSelector(value)

    raise SelectorSyntaxError(f"Unknown selector: {token}", token=token)


def _parse_coordinate(raw: str) -> Optional[float]:
    text = raw.strip()
    if not _NUMBER_RE.match(text):
        return None
    value = float(text)
    return value if math.isfinite(value) else None


def _strip_quotes(raw: str) -> str:
    """Trim, then drop one matching pair of surrounding quotes."""
    value = raw.strip()
    if not value:
        return ""
    if value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def _find(snapshot: UISnapshot, predicate: Callable[[CanonicalElement], bool]) -> Optional[CanonicalElement]:
    return next((element for element in snapshot.elements if predicate(element)), None)


def find_element(snapshot: UISnapshot, selector: ParsedSelector) -> Optional[CanonicalElement]:
    """Look up the element a non-coords selector points at, or None."""
    if isinstance(selector, RefSelector):
        return snapshot.get(selector.ref.value)
    if isinstance(selector, TextSelector):
        return _find(snapshot, lambda e: e.name == selector.text)
    if isinstance(selector, IdSelector):
        value = selector.id
        # iOS label also matches id: selectors; known ambiguity kept for compatibility
        return (
            _find(snapshot, lambda e: e.selectors.ios.id == value)
            or _find(snapshot, lambda e: e.selectors.ios.label == value)
            or _find(snapshot, lambda e: e.selectors.android.resource_id == value)
            or _find(snapshot, lambda e: e.selectors.android.content_desc == value)
        )
    raise TypeError(f"Unsupported selector type: {type(selector).__name__}")


def resolve_tap_target(snapshot: Optional[UISnapshot], selector: ParsedSelector) -> ResolvedTapTarget:
    """Resolve a selector to a tap point.

    Coords selectors never consult the snapshot, so ``snapshot`` may be
    None for them.

    Raises:
        NoMatchingElementError: If no element matches the selector
    """
    if isinstance(selector, CoordsSelector):
        return CoordsTarget(x=selector.x, y=selector.y)

    element = find_element(snapshot, selector) if snapshot is not None else None
    if element is None:
        raise NoMatchingElementError(format_selector(selector))
    return ElementTarget.for_element(element)


class SelectorResolver:
    """Resolves selector tokens against a snapshot.

    Wraps parse and resolve, and warns when the snapshot is older than
    the staleness threshold; stale refs still resolve.

    Examples:
        >>> resolver = SelectorResolver()
        >>> target = resolver.resolve(snapshot, "@e1")
        >>> target.to_dict()["kind"]
        'element'
    """

    def __init__(
        self,
        stale_after_seconds: float = DEFAULT_STALE_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.stale_after_seconds = stale_after_seconds
        self._clock = clock

    def resolve(self, snapshot: Optional[UISnapshot], token: str) -> ResolvedTapTarget:
        selector = parse_selector_token(token)
        if snapshot is not None and not isinstance(selector, CoordsSelector):
            if self.is_stale(snapshot):
                logger.warning(
                    "Resolving %s against a stale snapshot %s (older than %ss)",
                    format_selector(selector),
                    snapshot.snapshot_id,
                    self.stale_after_seconds,
                )
        return resolve_tap_target(snapshot, selector)

    def is_stale(self, snapshot: UISnapshot) -> bool:
        now = self._clock() if self._clock else None
        return snapshot.is_stale(now, self.stale_after_seconds)
