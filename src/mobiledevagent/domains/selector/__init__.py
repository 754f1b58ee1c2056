"""Selector Bounded Context for mobile-dev-agent.

Parses selector tokens (``@e3``, ``coords:10,20``, ``text:"Sign in"``,
``id:"login"``) and resolves them against a UISnapshot to a tap point.
"""

from mobiledevagent.domains.selector.services import (
    SelectorResolver,
    find_element,
    parse_selector_token,
    resolve_tap_target,
)
from mobiledevagent.domains.selector.value_objects import (
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

__all__ = [
    # Value Objects
    "CoordsSelector",
    "IdSelector",
    "ParsedSelector",
    "RefSelector",
    "TextSelector",
    "CoordsTarget",
    "ElementTarget",
    "ResolvedTapTarget",
    "format_selector",
    # Services
    "SelectorResolver",
    "find_element",
    "parse_selector_token",
    "resolve_tap_target",
]
