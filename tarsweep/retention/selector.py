"""
Retention selection for dated archives.

Partitions a set of archive names into archives to keep and archives to
delete. The most recent ``daily_keep`` archives are always kept. Older
archives survive only when their date falls exactly on one of the last
``weekly_keep`` weekly anchors, which are stepped forward from the oldest
archive in the set.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from loguru import logger

from tarsweep.retention.policy import Archive, RetentionPolicy, parse_archive


@dataclass
class Selection:
    """
    Outcome of a retention selection.

    Attributes:
        as_of_date: Reference date the selection was computed for
        cutoff: Start of the daily window (as_of_date - daily_keep days)
        to_keep: Archives that survive, oldest first
        to_delete: Archives selected for deletion, oldest first
        unparseable: Names without a trailing date, left untouched
        daily: Archives kept by the daily tier
        weekly: Archives spared by a weekly anchor
        weekly_anchors: Retained weekly anchor dates, oldest first
    """

    as_of_date: date
    cutoff: date
    to_keep: list[Archive] = field(default_factory=list)
    to_delete: list[Archive] = field(default_factory=list)
    unparseable: list[str] = field(default_factory=list)
    daily: list[Archive] = field(default_factory=list)
    weekly: list[Archive] = field(default_factory=list)
    weekly_anchors: list[date] = field(default_factory=list)

    @property
    def delete_names(self) -> list[str]:
        """Names of the archives to delete."""
        return [archive.name for archive in self.to_delete]

    @property
    def keep_names(self) -> list[str]:
        """Names of the archives to keep."""
        return [archive.name for archive in self.to_keep]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "as_of_date": str(self.as_of_date),
            "cutoff": str(self.cutoff),
            "to_keep": self.keep_names,
            "to_delete": self.delete_names,
            "unparseable": list(self.unparseable),
            "daily": [archive.name for archive in self.daily],
            "weekly": [archive.name for archive in self.weekly],
            "weekly_anchors": [str(anchor) for anchor in self.weekly_anchors],
        }


def daily_cutoff(policy: RetentionPolicy, as_of_date: date) -> date:
    """Return the first date inside the protected daily window."""
    return as_of_date - timedelta(days=policy.daily_keep)


def weekly_anchors(
    oldest: date,
    policy: RetentionPolicy,
    as_of_date: date,
    limit: bool = True,
) -> list[date]:
    """
    Compute weekly anchor dates.

    Anchors are oldest, oldest + 7d, oldest + 14d, ... for as long as the
    anchor is strictly older than the daily cutoff.

    Args:
        oldest: Date of the oldest archive in the set
        policy: Retention policy
        as_of_date: Reference date
        limit: If True, keep only the last ``weekly_keep`` anchors

    Returns:
        Anchor dates, oldest first
    """
    cutoff = daily_cutoff(policy, as_of_date)
    step = timedelta(days=policy.weekly_interval_days)

    anchors = []
    anchor = oldest
    while anchor < cutoff:
        anchors.append(anchor)
        anchor += step

    if limit and len(anchors) > policy.weekly_keep:
        anchors = anchors[-policy.weekly_keep:]
    return anchors


class RetentionSelector:
    """
    Applies a RetentionPolicy to a collection of archive names.

    The selector is stateless between calls and performs no I/O apart from
    logging, so one instance can be reused across targets.
    """

    def __init__(self, policy: RetentionPolicy):
        self.policy = policy

    def parse(self, names: Iterable[str]) -> tuple[list[Archive], list[str]]:
        """
        Parse archive names, sorted by date.

        Ties on date keep their input order.

        Returns:
            Tuple of (archives sorted oldest first, unparseable names)
        """
        archives = []
        unparseable = []
        for name in names:
            archive = parse_archive(name)
            if archive is None:
                logger.warning(f"don't know what to do with {name}")
                unparseable.append(name)
            else:
                archives.append(archive)

        archives.sort(key=lambda archive: archive.date)
        return archives, unparseable

    def select(self, names: Iterable[str], as_of_date: date | None = None) -> Selection:
        """
        Select archives for deletion.

        Args:
            names: Archive names in any order
            as_of_date: Reference date (defaults to today)

        Returns:
            Selection partitioning the input
        """
        as_of_date = as_of_date or date.today()
        policy = self.policy
        archives, unparseable = self.parse(names)

        selection = Selection(
            as_of_date=as_of_date,
            cutoff=daily_cutoff(policy, as_of_date),
            unparseable=unparseable,
        )

        if len(archives) < policy.daily_keep:
            logger.info(
                f"nothing to do: {len(archives)} archives, daily tier keeps {policy.daily_keep}"
            )
            selection.daily = list(archives)
            selection.to_keep = list(archives)
            return selection

        oldest = archives[0].date
        split = len(archives) - policy.daily_keep
        candidates = archives[:split]
        selection.daily = archives[split:]

        anchors = weekly_anchors(oldest, policy, as_of_date)
        anchor_dates = set(anchors)
        selection.weekly_anchors = anchors

        for archive in candidates:
            if archive.date in anchor_dates:
                selection.weekly.append(archive)
            else:
                selection.to_delete.append(archive)

        selection.to_keep = selection.weekly + selection.daily

        logger.debug(
            f"Selection as of {as_of_date}: keep {len(selection.to_keep)} "
            f"(daily={len(selection.daily)}, weekly={len(selection.weekly)}), "
            f"delete {len(selection.to_delete)}, unparseable {len(unparseable)}"
        )
        return selection


def select_for_deletion(
    names: Iterable[str],
    policy: RetentionPolicy,
    as_of_date: date | None = None,
) -> Selection:
    """
    Select archives for deletion under a policy.

    Convenience wrapper around RetentionSelector.select().

    Args:
        names: Archive names in any order
        policy: Retention policy
        as_of_date: Reference date (defaults to today)

    Returns:
        Selection with to_delete holding the archives to remove
    """
    return RetentionSelector(policy).select(names, as_of_date)
