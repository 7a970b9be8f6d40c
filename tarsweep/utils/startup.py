"""Startup validation for tarsweep.

Provides fail-fast validation of the tarsnap binary and key directory.
"""

from __future__ import annotations

import shutil

from loguru import logger

from tarsweep.utils.config import Config, get_config


def validate_startup(config: Config | None = None, check_key_dir: bool = True) -> list[str]:
    """
    Validate the runtime environment.

    Args:
        config: Configuration to check (defaults to get_config())
        check_key_dir: Whether the key directory must exist

    Returns:
        List of error messages. Empty if all valid.
    """
    config = config or get_config()
    errors = []

    if shutil.which(config.tarsnap_bin) is None:
        errors.append(f"tarsnap executable not found: {config.tarsnap_bin}")

    if check_key_dir and not config.key_dir.is_dir():
        errors.append(f"Key directory does not exist: {config.key_dir}")

    return errors


def fail_fast_startup(config: Config | None = None, check_key_dir: bool = True) -> None:
    """
    Validate startup and raise if invalid.

    Raises:
        RuntimeError: If the environment cannot run a cleanup.
    """
    errors = validate_startup(config, check_key_dir=check_key_dir)
    if errors:
        error_msg = "Startup validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    logger.debug("Startup validation passed")
