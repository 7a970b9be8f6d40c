"""Tarsnap command line integration."""

from tarsweep.tarsnap.client import TarsnapClient, TarsnapError
from tarsweep.tarsnap.targets import (
    Target,
    TargetError,
    build_target,
    discover_key_files,
    target_name_from_key,
)

__all__ = [
    "TarsnapClient",
    "TarsnapError",
    "Target",
    "TargetError",
    "build_target",
    "discover_key_files",
    "target_name_from_key",
]
