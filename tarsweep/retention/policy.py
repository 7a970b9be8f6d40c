"""
Retention policy and archive value types for tarsweep.

Defines the daily/weekly retention policy and the parsing of archive
names into dated archives.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

# Archive names end in YYYY-MM-DD, e.g. "web-2024-03-10"
ARCHIVE_DATE_PATTERN = re.compile(r"(\d{4})-(\d{2})-(\d{2})$")


@dataclass(frozen=True)
class Archive:
    """A Tarsnap archive name with the calendar date parsed from its suffix."""

    name: str
    date: date

    def __str__(self) -> str:
        return self.name


def parse_archive(name: str) -> Archive | None:
    """
    Parse an archive name into an Archive.

    Args:
        name: Archive identifier as listed by tarsnap

    Returns:
        Archive, or None if the name has no valid trailing date
    """
    match = ARCHIVE_DATE_PATTERN.search(name)
    if match is None:
        return None

    year, month, day = (int(part) for part in match.groups())
    try:
        return Archive(name=name, date=date(year, month, day))
    except ValueError:
        # Matches the pattern but is not a calendar date (2024-02-30)
        return None


@dataclass(frozen=True)
class RetentionPolicy:
    """
    Daily/weekly retention policy.

    Attributes:
        daily_keep: Number of most recent archives always kept
        weekly_keep: Number of most recent weekly checkpoints kept
        weekly_interval_days: Spacing between weekly checkpoints
    """

    daily_keep: int
    weekly_keep: int
    weekly_interval_days: int = 7

    def __post_init__(self) -> None:
        """Validate policy counts."""
        if self.daily_keep < 1:
            raise ValueError(f"daily_keep must be positive, got {self.daily_keep}")
        if self.weekly_keep < 1:
            raise ValueError(f"weekly_keep must be positive, got {self.weekly_keep}")
        if self.weekly_interval_days < 1:
            raise ValueError(
                f"weekly_interval_days must be positive, got {self.weekly_interval_days}"
            )

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for serialization."""
        return {
            "daily_keep": self.daily_keep,
            "weekly_keep": self.weekly_keep,
            "weekly_interval_days": self.weekly_interval_days,
        }


# 7 daily backups plus weekly backups for the last 12 weeks
DEFAULT_POLICY = RetentionPolicy(daily_keep=7, weekly_keep=12)
