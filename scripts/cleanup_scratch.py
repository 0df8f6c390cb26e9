"""Cron entry point for sweeping stranded scratch artifacts."""

from __future__ import annotations

import argparse
import sys
import time
from dataclasses import dataclass

from src.giffy.config import load_config
from src.giffy.media.scratch_cleanup import list_stale_artifacts, sweep_stale_artifacts


@dataclass(slots=True)
class SweepSummary:
    removed: int
    dry_run: bool


def perform_sweep(
    *,
    dry_run: bool,
    ttl_seconds: float | None = None,
    reference_time: float | None = None,
) -> SweepSummary:
    """Execute the sweep and return summary counters."""
    config = load_config()
    ttl = ttl_seconds if ttl_seconds is not None else config.scratch_ttl_seconds
    now = reference_time if reference_time is not None else time.time()

    if dry_run:
        stale = list_stale_artifacts(config.scratch_root, ttl, now=now)
        return SweepSummary(removed=len(stale), dry_run=True)

    removed = sweep_stale_artifacts(config.scratch_root, ttl, now=now)
    return SweepSummary(removed=removed, dry_run=False)


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Remove stale scratch artifacts.")
    parser.add_argument("--dry-run", action="store_true", help="Only report counts without deleting files.")
    parser.add_argument(
        "--ttl-seconds",
        type=float,
        default=None,
        help="Override the configured scratch TTL.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    try:
        summary = perform_sweep(dry_run=args.dry_run, ttl_seconds=args.ttl_seconds)
    except Exception as exc:
        print(f"sweep failed: {exc}", file=sys.stderr)
        return 2

    if summary.dry_run:
        print(f"sweep dry-run, stale={summary.removed}", file=sys.stdout)
    else:
        print(f"sweep done, removed={summary.removed}", file=sys.stdout)
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
