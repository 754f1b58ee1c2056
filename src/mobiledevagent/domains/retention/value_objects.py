"""Retention Domain Value Objects.

Immutable types describing run directories and what the retention
policy decides to do with them. Serialized field names are camelCase
because plans are consumed as JSON by the command layer.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from mobiledevagent.domains.shared.kernel import format_timestamp

SECONDS_PER_DAY = 24 * 60 * 60


class StartedAtSource(str, Enum):
    """Where a run's start time was taken from."""
    NAME = "name"
    MTIME = "mtime"


@dataclass(frozen=True)
class RunInfo:
    """One run directory as seen at scan time.

    Attributes:
        dir: Absolute path of the run directory
        started_at: Start instant (timezone-aware)
        started_at_source: Whether started_at came from the name or the mtime
        mtime_ms: Directory mtime in milliseconds at scan time, 0 if unknown
        ok: Outcome from result.json; None when unknown
        size_bytes: Recursive size of the regular files inside
    """
    dir: Path
    started_at: datetime
    started_at_source: StartedAtSource = StartedAtSource.MTIME
    mtime_ms: float = 0
    ok: Optional[bool] = None
    size_bytes: int = 0

    def __post_init__(self) -> None:
        if self.size_bytes < 0:
            raise ValueError(f"size_bytes must be non-negative, got {self.size_bytes}")

    @property
    def is_failure_or_unknown(self) -> bool:
        return self.ok is not True

    def age_seconds(self, now: datetime) -> float:
        return (now - self.started_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dir": str(self.dir),
            "startedAt": format_timestamp(self.started_at),
            "startedAtSource": self.started_at_source.value,
            "mtimeMs": self.mtime_ms,
            "ok": self.ok,
            "sizeBytes": self.size_bytes,
        }


@dataclass(frozen=True)
class RetentionPolicy:
    """Count, age and size limits for run directories.

    Attributes:
        keep_last: Number of newest runs always protected
        keep_failure_days: Failed or unknown runs younger than this are protected
        max_bytes: Byte budget for all remaining runs

    Invariants:
        - all limits are non-negative
        - protection yields to the byte budget, never the other way round
    """
    keep_last: int = 20
    keep_failure_days: float = 7
    max_bytes: int = 2 * 1024 * 1024 * 1024

    def __post_init__(self) -> None:
        if self.keep_last < 0:
            raise ValueError(f"keep_last must be non-negative, got {self.keep_last}")
        if self.keep_failure_days < 0:
            raise ValueError(
                f"keep_failure_days must be non-negative, got {self.keep_failure_days}"
            )
        if self.max_bytes < 0:
            raise ValueError(f"max_bytes must be non-negative, got {self.max_bytes}")

    @property
    def keep_failure_seconds(self) -> float:
        return self.keep_failure_days * SECONDS_PER_DAY

    @classmethod
    def from_settings(cls, settings: Any) -> "RetentionPolicy":
        """Build a policy from the gc_* fields of a Settings object."""
        return cls(
            keep_last=int(settings.gc_keep_last),
            keep_failure_days=settings.gc_keep_failure_days,
            max_bytes=int(settings.gc_max_bytes),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keepLast": self.keep_last,
            "keepFailureDays": self.keep_failure_days,
            "maxBytes": self.max_bytes,
        }


@dataclass(frozen=True)
class GCPlan:
    """The keep/delete partition computed by the planner.

    A pure value; nothing has been touched on disk when a plan exists.
    ``delete`` is in the order deletions must happen.
    """
    keep_last: int
    keep_failure_days: float
    max_bytes: int
    total_runs: int
    total_bytes: int
    keep: Tuple[RunInfo, ...] = ()
    delete: Tuple[RunInfo, ...] = ()
    after_bytes: int = 0

    @property
    def within_budget(self) -> bool:
        return self.after_bytes <= self.max_bytes

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keepLast": self.keep_last,
            "keepFailureDays": self.keep_failure_days,
            "maxBytes": self.max_bytes,
            "totalRuns": self.total_runs,
            "totalBytes": self.total_bytes,
            "keep": [run.to_dict() for run in self.keep],
            "delete": [run.to_dict() for run in self.delete],
            "afterBytes": self.after_bytes,
        }


@dataclass(frozen=True)
class ExecutionReport:
    """What the executor actually did with a plan."""
    deleted: Tuple[Path, ...] = ()
    skipped_missing: Tuple[Path, ...] = ()
    skipped_changed: Tuple[Path, ...] = ()
    dry_run: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deleted": [str(p) for p in self.deleted],
            "skipped_missing": [str(p) for p in self.skipped_missing],
            "skipped_changed": [str(p) for p in self.skipped_changed],
            "dry_run": self.dry_run,
        }
