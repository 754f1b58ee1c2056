"""Typed accessors for loosely-shaped accessibility payloads.

Accessibility tools emit different shapes across versions, so nodes are
read as plain mappings through these helpers instead of a fixed schema.
"""

from __future__ import annotations

import math
from typing import Any, Iterable, Mapping, Optional

from mobiledevagent.domains.snapshot.value_objects import Number, as_number, to_bool

__all__ = ["first_string", "sub_mapping", "to_bool", "to_number"]


def first_string(node: Mapping[str, Any], keys: Iterable[str]) -> Optional[str]:
    """Return the first non-blank string value among ``keys``, unmodified."""
    for key in keys:
        value = node.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return None


def to_number(value: Any, default: Number) -> Number:
    """Coerce finite numbers and numeric strings; else ``default``."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return as_number(value) if math.isfinite(value) else default
    if isinstance(value, str):
        try:
            parsed = float(value.strip())
        except ValueError:
            return default
        return as_number(parsed) if math.isfinite(parsed) else default
    return default


def sub_mapping(node: Mapping[str, Any], key: str) -> Optional[Mapping[str, Any]]:
    """Return ``node[key]`` if it is a mapping."""
    value = node.get(key)
    return value if isinstance(value, Mapping) else None
