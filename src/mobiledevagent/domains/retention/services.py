"""Retention Domain Services.

Garbage collection of run directories is split in three steps:

- RunScanner lists run directories and measures them
- RetentionPlanner computes a GCPlan from the scan and a policy (pure)
- RetentionExecutor applies a plan, re-checking each directory first

Planning never touches the filesystem, so a plan can be shown to the
user (dry run) before anything is deleted.
"""

from __future__ import annotations

import json
import logging
import os
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Union

from .events import RunDeleted, RunDeletionSkipped
from .value_objects import ExecutionReport, GCPlan, RetentionPolicy, RunInfo, StartedAtSource

logger = logging.getLogger(__name__)

RUNS_DIR_NAME = "runs"
RESULT_FILENAME = "result.json"

# Run directories are named <YYYYMMDD-HHMMSS>-<suffix>
_RUN_NAME_RE = re.compile(r"^(\d{4})(\d{2})(\d{2})-(\d{2})(\d{2})(\d{2})")
_EPOCH = datetime.fromtimestamp(0, timezone.utc)


def parse_started_at_from_name(dir_name: str) -> Optional[datetime]:
    """Read the start time encoded in a run directory name, as local time.

    Returns:
        An aware datetime, or None if the name carries no valid timestamp
    """
    match = _RUN_NAME_RE.match(dir_name)
    if not match:
        return None
    try:
        naive = datetime(*(int(part) for part in match.groups()))
    except ValueError:
        return None
    return naive.astimezone()


def dir_size_bytes(path: Union[str, Path]) -> int:
    """Recursive size of the regular files under ``path``. Symlinks are not followed."""
    total = 0
    try:
        with os.scandir(path) as it:
            entries = list(it)
    except OSError:
        return 0
    for entry in entries:
        try:
            if entry.is_dir(follow_symlinks=False):
                total += dir_size_bytes(entry.path)
            elif entry.is_file(follow_symlinks=False):
                total += entry.stat(follow_symlinks=False).st_size
        except OSError as exc:
            logger.debug("Skipping %s while sizing run: %s", entry.path, exc)
    return total


def read_run_ok(run_dir: Path) -> Optional[bool]:
    """Outcome recorded in ``result.json``; None when absent or unreadable."""
    try:
        raw = (run_dir / RESULT_FILENAME).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return None
    if not raw:
        return None
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if isinstance(parsed, dict) and isinstance(parsed.get("ok"), bool):
        return parsed["ok"]
    return None


def _mtime_ms(stat_result: os.stat_result) -> float:
    return stat_result.st_mtime_ns / 1_000_000


class RunScanner:
    """Lists the run directories under ``<cache_dir>/runs``.

    Examples:
        >>> runs = RunScanner().list_runs(settings.cache_dir)
        >>> runs[0].started_at >= runs[-1].started_at
        True
    """

    def list_runs(self, cache_dir: Union[str, Path]) -> List[RunInfo]:
        """Scan run directories, newest first.

        Args:
            cache_dir: The cache root; runs live in its ``runs`` child

        Returns:
            One RunInfo per run directory; empty if there is no runs directory
        """
        runs_root = Path(cache_dir) / RUNS_DIR_NAME
        try:
            with os.scandir(runs_root) as it:
                entries = sorted(it, key=lambda e: e.name)
        except (FileNotFoundError, NotADirectoryError):
            return []

        runs: List[RunInfo] = []
        for entry in entries:
            if not entry.is_dir(follow_symlinks=False):
                continue
            runs.append(self.describe(Path(entry.path)))

        runs.sort(key=lambda r: r.started_at, reverse=True)
        logger.debug("Scanned %d runs under %s", len(runs), runs_root)
        return runs

    def describe(self, run_dir: Path) -> RunInfo:
        """Build the RunInfo for a single run directory."""
        try:
            st: Optional[os.stat_result] = run_dir.stat()
        except OSError:
            st = None

        from_name = parse_started_at_from_name(run_dir.name)
        if from_name is not None:
            started_at, source = from_name, StartedAtSource.NAME
        else:
            started_at = (
                datetime.fromtimestamp(st.st_mtime, timezone.utc) if st is not None else _EPOCH
            )
            source = StartedAtSource.MTIME

        return RunInfo(
            dir=run_dir,
            started_at=started_at,
            started_at_source=source,
            mtime_ms=_mtime_ms(st) if st is not None else 0,
            ok=read_run_ok(run_dir),
            size_bytes=dir_size_bytes(run_dir),
        )


class RetentionPlanner:
    """Computes which runs to keep and which to delete.

    Rules, applied to runs sorted newest first:

    1. the ``keep_last`` newest runs are protected
    2. failed or unknown runs younger than ``keep_failure_days`` are protected
    3. unprotected runs are deleted oldest first while over ``max_bytes``
    4. if still over budget, protected runs are deleted oldest first too

    Deletion only happens under size pressure; a corpus within budget
    is kept whole regardless of the count limit.
    """

    def plan(
        self,
        runs: Iterable[RunInfo],
        policy: RetentionPolicy,
        now: Optional[datetime] = None,
    ) -> GCPlan:
        """Compute a GCPlan.

        Args:
            runs: Scanned runs (any order; sorted newest first here)
            policy: The retention limits
            now: Reference instant for ages (defaults to the wall clock)

        Returns:
            The plan; ``keep`` newest first, ``delete`` in deletion order
        """
        now = now or datetime.now(timezone.utc)
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        ordered = sorted(runs, key=lambda r: r.started_at, reverse=True)
        total_bytes = sum(r.size_bytes for r in ordered)

        protected: Set[Path] = {r.dir for r in ordered[: policy.keep_last]}
        for run in ordered:
            if run.is_failure_or_unknown and run.age_seconds(now) <= policy.keep_failure_seconds:
                protected.add(run.dir)

        deletions: List[RunInfo] = []
        after_bytes = total_bytes

        def delete_oldest_first(candidates: Sequence[RunInfo]) -> None:
            nonlocal after_bytes
            for run in sorted(candidates, key=lambda r: r.started_at):
                if after_bytes <= policy.max_bytes:
                    break
                deletions.append(run)
                after_bytes -= run.size_bytes

        delete_oldest_first([r for r in ordered if r.dir not in protected])

        if after_bytes > policy.max_bytes:
            marked = {r.dir for r in deletions}
            delete_oldest_first([r for r in ordered if r.dir in protected and r.dir not in marked])

        deleted_dirs = {r.dir for r in deletions}
        plan = GCPlan(
            keep_last=policy.keep_last,
            keep_failure_days=policy.keep_failure_days,
            max_bytes=policy.max_bytes,
            total_runs=len(ordered),
            total_bytes=total_bytes,
            keep=tuple(r for r in ordered if r.dir not in deleted_dirs),
            delete=tuple(deletions),
            after_bytes=after_bytes,
        )
        logger.debug(
            "GC plan: %d runs, %d bytes -> delete %d, %d bytes remain (budget %d)",
            plan.total_runs,
            plan.total_bytes,
            len(plan.delete),
            plan.after_bytes,
            plan.max_bytes,
        )
        return plan


class RetentionExecutor:
    """Applies a GCPlan to the filesystem.

    Each run is re-checked before deletion: a directory that is gone, or
    whose mtime differs from the one recorded at scan time, is skipped.
    Those races are expected with concurrent writers and are reported,
    not raised. Any other filesystem error propagates.
    """

    def __init__(self) -> None:
        self._events: List[object] = []

    def execute(self, plan: GCPlan, dry_run: bool = False) -> ExecutionReport:
        if dry_run:
            logger.info("Dry run: %d runs would be deleted", len(plan.delete))
            return ExecutionReport(dry_run=True)

        deleted: List[Path] = []
        missing: List[Path] = []
        changed: List[Path] = []

        for run in plan.delete:
            try:
                current = run.dir.stat()
            except FileNotFoundError:
                missing.append(run.dir)
                self._record(RunDeletionSkipped(dir=str(run.dir), reason="missing"))
                continue

            if run.mtime_ms and _mtime_ms(current) != run.mtime_ms:
                changed.append(run.dir)
                self._record(RunDeletionSkipped(dir=str(run.dir), reason="changed"))
                continue

            try:
                shutil.rmtree(run.dir)
            except FileNotFoundError:
                missing.append(run.dir)
                self._record(RunDeletionSkipped(dir=str(run.dir), reason="missing"))
                continue
            deleted.append(run.dir)
            self._record(RunDeleted(dir=str(run.dir), size_bytes=run.size_bytes))

        return ExecutionReport(
            deleted=tuple(deleted),
            skipped_missing=tuple(missing),
            skipped_changed=tuple(changed),
            dry_run=False,
        )

    def _record(self, event: Union[RunDeleted, RunDeletionSkipped]) -> None:
        self._events.append(event)
        logger.info("Domain event: %s", event.to_dict())

    def get_pending_events(self) -> List[object]:
        """Return and clear the events emitted since the last call."""
        events = list(self._events)
        self._events.clear()
        return events
