"""
Runtime configuration for tarsweep.

Settings come from TARSWEEP_* environment variables, falling back to the
defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from tarsweep.retention.policy import DEFAULT_POLICY, RetentionPolicy

# Delete-only keys of the form <name>.cleanup.key
DEFAULT_KEY_DIR = Path("/root/.tarsnap")
DEFAULT_CACHE_DIR = Path("/tmp/tarsnap/cache")


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, falling back on bad values."""
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {name}: {raw!r}, using default {default}")
        return default


def _env_float(name: str) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Invalid number for {name}: {raw!r}, ignoring")
        return None


@dataclass
class Config:
    """
    tarsweep settings.

    Attributes:
        key_dir: Directory searched for *cleanup.key files
        cache_dir: Root of the per-target tarsnap cache directories
        daily_keep: Daily tier size
        weekly_keep: Weekly tier size
        tarsnap_bin: tarsnap executable
        timeout: Per-command timeout in seconds (None waits forever)
        log_level: Default loguru level for the CLI
    """

    key_dir: Path = field(default_factory=lambda: DEFAULT_KEY_DIR)
    cache_dir: Path = field(default_factory=lambda: DEFAULT_CACHE_DIR)
    daily_keep: int = DEFAULT_POLICY.daily_keep
    weekly_keep: int = DEFAULT_POLICY.weekly_keep
    tarsnap_bin: str = "tarsnap"
    timeout: float | None = None
    log_level: str = "INFO"

    @property
    def policy(self) -> RetentionPolicy:
        """Retention policy built from the configured tier sizes."""
        return RetentionPolicy(daily_keep=self.daily_keep, weekly_keep=self.weekly_keep)

    @classmethod
    def from_env(cls) -> Config:
        """Build a Config from TARSWEEP_* environment variables."""
        key_dir = os.getenv("TARSWEEP_KEY_DIR")
        cache_dir = os.getenv("TARSWEEP_CACHE_DIR")
        return cls(
            key_dir=Path(key_dir).expanduser() if key_dir else DEFAULT_KEY_DIR,
            cache_dir=Path(cache_dir).expanduser() if cache_dir else DEFAULT_CACHE_DIR,
            daily_keep=_env_int("TARSWEEP_DAILY_KEEP", DEFAULT_POLICY.daily_keep),
            weekly_keep=_env_int("TARSWEEP_WEEKLY_KEEP", DEFAULT_POLICY.weekly_keep),
            tarsnap_bin=os.getenv("TARSWEEP_TARSNAP_BIN") or "tarsnap",
            timeout=_env_float("TARSWEEP_TIMEOUT"),
            log_level=(os.getenv("TARSWEEP_LOG_LEVEL") or "INFO").upper(),
        )


_config: Config | None = None


def get_config() -> Config:
    """Return the process-wide Config, loading it from the environment once."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reset_config() -> None:
    """Forget the cached Config (used by tests)."""
    global _config
    _config = None
