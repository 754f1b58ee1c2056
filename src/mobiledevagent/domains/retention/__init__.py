"""Retention Bounded Context for mobile-dev-agent.

Size- and age-bounded garbage collection of run directories, planned
first and executed as a separate step.

Example Usage:
    from mobiledevagent.domains.retention import (
        RetentionExecutor,
        RetentionPlanner,
        RetentionPolicy,
        RunScanner,
    )

    runs = RunScanner().list_runs(settings.cache_dir)
    plan = RetentionPlanner().plan(runs, RetentionPolicy(keep_last=10))
    report = RetentionExecutor().execute(plan, dry_run=True)
"""

from mobiledevagent.domains.retention.events import RunDeleted, RunDeletionSkipped
from mobiledevagent.domains.retention.services import (
    RetentionExecutor,
    RetentionPlanner,
    RunScanner,
    dir_size_bytes,
    parse_started_at_from_name,
    read_run_ok,
)
from mobiledevagent.domains.retention.value_objects import (
    ExecutionReport,
    GCPlan,
    RetentionPolicy,
    RunInfo,
    StartedAtSource,
)

__all__ = [
    # Value Objects
    "ExecutionReport",
    "GCPlan",
    "RetentionPolicy",
    "RunInfo",
    "StartedAtSource",
    # Domain Events
    "RunDeleted",
    "RunDeletionSkipped",
    # Services
    "RetentionExecutor",
    "RetentionPlanner",
    "RunScanner",
    "dir_size_bytes",
    "parse_started_at_from_name",
    "read_run_ok",
]
