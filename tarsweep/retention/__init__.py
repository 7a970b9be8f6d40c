"""
Archive retention for tarsweep.

Keeps the most recent daily archives plus a capped set of weekly
checkpoints, and deletes the rest.

Usage:
    from tarsweep.retention import RetentionPolicy, select_for_deletion

    policy = RetentionPolicy(daily_keep=7, weekly_keep=12)
    selection = select_for_deletion(names, policy, as_of_date=date.today())
    for archive in selection.to_delete:
        ...
"""

from tarsweep.retention.policy import (
    DEFAULT_POLICY,
    Archive,
    RetentionPolicy,
    parse_archive,
)
from tarsweep.retention.selector import (
    RetentionSelector,
    Selection,
    select_for_deletion,
    weekly_anchors,
)
from tarsweep.retention.cleanup import (
    CleanupResult,
    ExecutionMode,
    TargetCleanupJob,
    discover_and_run,
    run_cleanup,
)

__all__ = [
    "DEFAULT_POLICY",
    "Archive",
    "RetentionPolicy",
    "parse_archive",
    "RetentionSelector",
    "Selection",
    "select_for_deletion",
    "weekly_anchors",
    "CleanupResult",
    "ExecutionMode",
    "TargetCleanupJob",
    "discover_and_run",
    "run_cleanup",
]
