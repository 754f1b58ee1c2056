"""Shared Kernel for mobile-dev-agent bounded contexts."""

from mobiledevagent.domains.shared.errors import (
    InvalidSessionNameError,
    InvalidSnapshotError,
    MobileDevAgentError,
    NoMatchingElementError,
    SelectorSyntaxError,
    SnapshotNotFoundError,
)
from mobiledevagent.domains.shared.kernel import (
    ElementRef,
    Platform,
    Role,
    format_timestamp,
    parse_timestamp,
)

__all__ = [
    "ElementRef",
    "Platform",
    "Role",
    "format_timestamp",
    "parse_timestamp",
    "MobileDevAgentError",
    "SelectorSyntaxError",
    "NoMatchingElementError",
    "InvalidSnapshotError",
    "SnapshotNotFoundError",
    "InvalidSessionNameError",
]
