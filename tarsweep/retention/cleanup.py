"""
Cleanup jobs that apply the retention policy to Tarsnap targets.

Each target is refreshed, listed, run through the RetentionSelector and
then pruned. Dry-run mode reports what would be deleted without touching
any archive.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from loguru import logger

from tarsweep.retention.policy import RetentionPolicy
from tarsweep.retention.selector import RetentionSelector
from tarsweep.tarsnap.client import TarsnapClient
from tarsweep.tarsnap.targets import build_target, discover_key_files


class ExecutionMode(Enum):
    """Whether deletions are performed or only reported."""

    DRY_RUN = "dry_run"
    COMMIT = "commit"


class ArchiveStore(Protocol):
    """Operations the cleanup job needs from the backup tool."""

    def refresh_cache(self) -> None: ...

    def list_archives(self) -> list[str]: ...

    def delete_archive(self, name: str) -> None: ...


@dataclass
class CleanupResult:
    """
    Result of cleaning up one target.

    Attributes:
        target: Target name
        mode: Execution mode the job ran in
        deleted: Archives deleted (or that would be deleted in dry-run)
        kept: Archives retained by the policy
        unparseable: Archive names left alone because they carry no date
        errors: Error messages; a non-empty list marks the run as failed
        duration_seconds: Time taken for the target
    """

    target: str
    mode: ExecutionMode
    deleted: list[str] = field(default_factory=list)
    kept: list[str] = field(default_factory=list)
    unparseable: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def dry_run(self) -> bool:
        return self.mode is ExecutionMode.DRY_RUN

    @property
    def success(self) -> bool:
        """Check if cleanup was successful."""
        return len(self.errors) == 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "target": self.target,
            "mode": self.mode.value,
            "deleted": list(self.deleted),
            "kept": list(self.kept),
            "unparseable": list(self.unparseable),
            "errors": list(self.errors),
            "duration_seconds": self.duration_seconds,
        }


class TargetCleanupJob:
    """
    Prunes the archives of a single target.

    The cache is refreshed before listing so the selection never runs on a
    stale archive list. A failed refresh or listing aborts the target; a
    failed deletion is recorded and the remaining deletions still run.
    """

    def __init__(
        self,
        store: ArchiveStore,
        target: str,
        policy: RetentionPolicy,
        mode: ExecutionMode = ExecutionMode.DRY_RUN,
    ):
        """
        Initialize the cleanup job.

        Args:
            store: Backup tool wrapper for this target
            target: Target name used in log output
            policy: Retention policy to apply
            mode: DRY_RUN only reports, COMMIT deletes
        """
        self._store = store
        self._target = target
        self._mode = mode
        self._selector = RetentionSelector(policy)

    def run(self, as_of_date: date | None = None) -> CleanupResult:
        """
        Run the cleanup for this target.

        Args:
            as_of_date: Reference date for the retention window (defaults to today)

        Returns:
            CleanupResult for the target
        """
        start_time = time.time()
        result = CleanupResult(target=self._target, mode=self._mode)
        logger.info(f"cleaning up {self._target}")

        try:
            self._store.refresh_cache()
            names = self._store.list_archives()
        except Exception as e:
            logger.error(f"Aborting {self._target}: {e}")
            result.errors.append(str(e))
            result.duration_seconds = time.time() - start_time
            return result

        selection = self._selector.select(names, as_of_date)
        result.kept = selection.keep_names
        result.unparseable = list(selection.unparseable)

        for archive in selection.to_delete:
            if self._mode is ExecutionMode.DRY_RUN:
                logger.info(f"would delete {archive.name}")
                result.deleted.append(archive.name)
                continue

            logger.info(f"deleting {archive.name}")
            try:
                self._store.delete_archive(archive.name)
                result.deleted.append(archive.name)
            except Exception as e:
                logger.error(f"Error deleting {archive.name} from {self._target}: {e}")
                result.errors.append(f"{archive.name}: {e}")

        result.duration_seconds = time.time() - start_time
        logger.info(
            f"Cleanup {self._target}: deleted={len(result.deleted)}, kept={len(result.kept)}, "
            f"unparseable={len(result.unparseable)}, errors={len(result.errors)}"
        )
        return result


def run_cleanup(
    key_files: Iterable[Path | str],
    cache_root: Path | str,
    policy: RetentionPolicy,
    mode: ExecutionMode = ExecutionMode.DRY_RUN,
    as_of_date: date | None = None,
    executable: str = "tarsnap",
    timeout: float | None = None,
) -> dict[str, CleanupResult]:
    """
    Clean up each key file's target in turn.

    A key file that does not name a target, or names one already seen, is
    recorded as a failure under its key path and skipped. A target whose job
    raises is reported; the remaining targets still run.

    Args:
        key_files: Cleanup key files, one per target
        cache_root: Directory holding one cache directory per target
        policy: Retention policy to apply
        mode: Execution mode
        as_of_date: Reference date (defaults to today)
        executable: tarsnap binary
        timeout: Optional per-command timeout in seconds

    Returns:
        Dictionary mapping target name (or key path when unnamed) to CleanupResult
    """
    as_of_date = as_of_date or date.today()
    key_files = list(key_files)
    results = {}

    logger.info(
        f"Running cleanup (mode={mode.value}) for {len(key_files)} targets as of {as_of_date}"
    )

    for key_file in key_files:
        try:
            target = build_target(key_file, cache_root)
        except ValueError as e:
            logger.error(f"Skipping {key_file}: {e}")
            results[str(key_file)] = CleanupResult(
                target=str(key_file), mode=mode, errors=[str(e)]
            )
            continue

        # Cache directories are keyed by name and must not be shared
        if target.name in results:
            error = f"duplicate target name {target.name!r} for {key_file}"
            logger.error(f"Skipping {key_file}: {error}")
            results[str(key_file)] = CleanupResult(
                target=str(key_file), mode=mode, errors=[error]
            )
            continue

        client = TarsnapClient(
            target.key_file, target.cache_dir, executable=executable, timeout=timeout
        )
        job = TargetCleanupJob(client, target.name, policy, mode)

        try:
            results[target.name] = job.run(as_of_date)
        except Exception as e:
            logger.error(f"Error cleaning up {target.name}: {e}")
            results[target.name] = CleanupResult(target=target.name, mode=mode, errors=[str(e)])

    return results


def discover_and_run(
    key_dir: Path | str,
    cache_root: Path | str,
    policy: RetentionPolicy,
    mode: ExecutionMode = ExecutionMode.DRY_RUN,
    as_of_date: date | None = None,
    executable: str = "tarsnap",
    timeout: float | None = None,
) -> dict[str, CleanupResult]:
    """Discover cleanup keys below key_dir and run the cleanup for each."""
    return run_cleanup(
        discover_key_files(key_dir),
        cache_root,
        policy,
        mode=mode,
        as_of_date=as_of_date,
        executable=executable,
        timeout=timeout,
    )
