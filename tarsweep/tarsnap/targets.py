"""
Discovery of cleanup targets.

A target is a delete-capable key file named ``<name>.cleanup.key`` plus a
cache directory reserved for that name.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

KEY_GLOB = "**/*cleanup.key"

_TARGET_NAME_PATTERN = re.compile(r"(.+)\.cleanup")


class TargetError(ValueError):
    """Raised when a key file does not identify a target."""


@dataclass(frozen=True)
class Target:
    """A key file and the cache directory dedicated to it."""

    name: str
    key_file: Path
    cache_dir: Path


def target_name_from_key(key_file: Path | str) -> str:
    """
    Derive the target name from a key file path.

    Args:
        key_file: Path such as /root/.tarsnap/web.cleanup.key

    Returns:
        Target name ("web")

    Raises:
        TargetError: If the file name has no "<name>.cleanup" part
    """
    match = _TARGET_NAME_PATTERN.match(Path(key_file).name)
    if match is None:
        raise TargetError(f"could not determine basename of {key_file}")
    return match.group(1)


def build_target(key_file: Path | str, cache_root: Path | str) -> Target:
    """
    Build a Target for a key file.

    Raises:
        TargetError: If the key file does not identify a target
    """
    name = target_name_from_key(key_file)
    return Target(name=name, key_file=Path(key_file), cache_dir=Path(cache_root) / name)


def discover_key_files(key_dir: Path | str) -> list[Path]:
    """
    Find cleanup key files below a directory.

    Args:
        key_dir: Directory searched recursively

    Returns:
        Sorted list of key file paths (empty if the directory is missing)
    """
    key_dir = Path(key_dir)
    if not key_dir.is_dir():
        logger.warning(f"Key directory does not exist: {key_dir}")
        return []

    keys = sorted(path for path in key_dir.glob(KEY_GLOB) if path.is_file())
    logger.debug(f"Found {len(keys)} cleanup keys in {key_dir}")
    return keys
