"""
Command line interface for tarsweep.

Usage:
    # Dry run: report what would be deleted
    python -m tarsweep

    # Really delete
    python -m tarsweep --really

    # Single key, custom tiers
    python -m tarsweep --key /root/.tarsnap/web.cleanup.key --daily 7 --weekly 12
"""

import argparse
import sys
from dataclasses import replace
from datetime import date
from pathlib import Path

from loguru import logger

from tarsweep.retention.cleanup import (
    CleanupResult,
    ExecutionMode,
    discover_and_run,
    run_cleanup,
)
from tarsweep.utils.config import get_config
from tarsweep.utils.startup import fail_fast_startup


def configure_logging(level: str) -> None:
    """Send log output to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    config = get_config()
    parser = argparse.ArgumentParser(
        prog="tarsweep",
        description="Prune Tarsnap archives to a daily/weekly retention policy",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Dry run for every key in the key directory:
    python -m tarsweep

  Really delete:
    python -m tarsweep --really

  Keep 14 daily and 8 weekly archives for one key:
    python -m tarsweep --key /root/.tarsnap/web.cleanup.key --daily 14 --weekly 8
""",
    )

    parser.add_argument(
        "--really",
        "--commit",
        dest="commit",
        action="store_true",
        help="Actually delete archives (default is a dry run)",
    )
    parser.add_argument(
        "--key-dir",
        type=Path,
        default=config.key_dir,
        help=f"Directory searched for *cleanup.key files (default: {config.key_dir})",
    )
    parser.add_argument(
        "--key",
        dest="keys",
        type=Path,
        action="append",
        metavar="FILE",
        help="Only process this key file (repeatable)",
    )
    parser.add_argument(
        "--cache-dir",
        type=Path,
        default=config.cache_dir,
        help=f"Root of the per-target cache directories (default: {config.cache_dir})",
    )
    parser.add_argument(
        "--daily",
        type=int,
        default=config.daily_keep,
        help=f"Number of most recent archives to keep (default: {config.daily_keep})",
    )
    parser.add_argument(
        "--weekly",
        type=int,
        default=config.weekly_keep,
        help=f"Number of weekly archives to keep (default: {config.weekly_keep})",
    )
    parser.add_argument(
        "--as-of",
        type=date.fromisoformat,
        metavar="YYYY-MM-DD",
        help="Reference date for the retention window (default: today)",
    )
    parser.add_argument(
        "--tarsnap",
        default=config.tarsnap_bin,
        metavar="PATH",
        help=f"tarsnap executable (default: {config.tarsnap_bin})",
    )
    parser.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress output except errors",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Show debug output",
    )
    return parser


def print_summary(results: dict[str, CleanupResult]) -> None:
    """Print one line per target."""
    if not results:
        print("No cleanup keys found")
        return

    for name, result in results.items():
        verb = "would delete" if result.dry_run else "deleted"
        status = "ok" if result.success else f"FAILED ({len(result.errors)} errors)"
        print(
            f"{name}: {verb} {len(result.deleted)}, kept {len(result.kept)}, "
            f"unparseable {len(result.unparseable)} - {status}"
        )


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    config = get_config()
    args = build_parser().parse_args(argv)

    if args.quiet:
        configure_logging("ERROR")
    elif args.verbose:
        configure_logging("DEBUG")
    else:
        configure_logging(config.log_level)

    run_config = replace(
        config,
        key_dir=args.key_dir,
        cache_dir=args.cache_dir,
        daily_keep=args.daily,
        weekly_keep=args.weekly,
        tarsnap_bin=args.tarsnap,
    )

    try:
        policy = run_config.policy
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    mode = ExecutionMode.COMMIT if args.commit else ExecutionMode.DRY_RUN

    try:
        fail_fast_startup(run_config, check_key_dir=not args.keys)

        if args.keys:
            results = run_cleanup(
                args.keys,
                run_config.cache_dir,
                policy,
                mode=mode,
                as_of_date=args.as_of,
                executable=run_config.tarsnap_bin,
                timeout=run_config.timeout,
            )
        else:
            results = discover_and_run(
                run_config.key_dir,
                run_config.cache_dir,
                policy,
                mode=mode,
                as_of_date=args.as_of,
                executable=run_config.tarsnap_bin,
                timeout=run_config.timeout,
            )
    except Exception as e:
        logger.error(f"Cleanup failed: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if not args.quiet:
        print_summary(results)

    return 0 if all(result.success for result in results.values()) else 1


if __name__ == "__main__":
    sys.exit(main())
