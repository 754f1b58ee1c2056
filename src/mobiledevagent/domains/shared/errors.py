"""Error hierarchy for the mobile-dev-agent core.

Every failure the core reports to its caller derives from
MobileDevAgentError. Each error carries a machine-readable code, the
process exit code the command layer should use, and optional detail
lines for diagnostics.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

USAGE = "USAGE"
FAILED = "FAILED"


class MobileDevAgentError(Exception):
    """Base error for all typed failures produced by the core.

    Attributes:
        message: Human-readable error message
        code: Machine-readable error code (USAGE or FAILED)
        exit_code: Exit code for the command layer (2 for usage errors)
        details: Extra diagnostic lines
    """

    default_code: str = FAILED

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        exit_code: Optional[int] = None,
        details: Optional[List[str]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        if exit_code is None:
            exit_code = 2 if self.code == USAGE else 1
        self.exit_code = exit_code
        self.details = [d for d in (details or []) if d and d.strip()]
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the structured error shape used in JSON output."""
        return {
            "code": self.code,
            "message": self.message,
            "details": list(self.details),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, code={self.code!r})"


class SelectorSyntaxError(MobileDevAgentError, ValueError):
    """A selector token does not match any known grammar form."""

    default_code = USAGE

    def __init__(self, message: str, token: str = "", **kwargs: Any) -> None:
        self.token = token
        super().__init__(message, **kwargs)


class NoMatchingElementError(MobileDevAgentError, LookupError):
    """A valid selector matched no element in the snapshot.

    Attributes:
        selector: The rendered form of the selector that missed
    """

    default_code = USAGE

    def __init__(self, selector: str, **kwargs: Any) -> None:
        self.selector = selector
        super().__init__(f"No matching element for selector: {selector}", **kwargs)


class InvalidSnapshotError(MobileDevAgentError):
    """A persisted snapshot failed the structural shape check."""

    def __init__(
        self,
        message: str = "Invalid snapshot file for this session. Re-run: mobile-dev-agent ui parse",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)


class SnapshotNotFoundError(MobileDevAgentError):
    """No snapshot has been stored for the session yet."""

    def __init__(self, session: str, **kwargs: Any) -> None:
        self.session = session
        super().__init__(
            f"No snapshot found for session '{session}'. Run: mobile-dev-agent ui parse",
            **kwargs,
        )


class InvalidSessionNameError(MobileDevAgentError, ValueError):
    """A session name is empty, too long or escapes the sessions directory."""

    default_code = USAGE
