"""Helpers for sweeping stranded scratch artifacts."""

from __future__ import annotations

import logging
import time
from pathlib import Path

logger = logging.getLogger(__name__)


def list_stale_artifacts(root: Path, ttl_seconds: float, *, now: float | None = None) -> list[Path]:
    """Return scratch files whose modification time is older than ``ttl_seconds``."""
    if not root.is_dir():
        return []
    cutoff = (now if now is not None else time.time()) - ttl_seconds
    stale: list[Path] = []
    for path in root.iterdir():
        try:
            if path.is_file() and path.stat().st_mtime < cutoff:
                stale.append(path)
        except FileNotFoundError:
            # Removed by its owning request while we were scanning.
            continue
    return stale


def sweep_stale_artifacts(root: Path, ttl_seconds: float, *, now: float | None = None) -> int:
    """Remove stale scratch files left behind by crashed requests."""
    removed = 0
    for path in list_stale_artifacts(root, ttl_seconds, now=now):
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning(
                "media.scratch.sweep_failed",
                extra={"path": str(path)},
                exc_info=exc,
            )
            continue
        removed += 1
        logger.info("media.scratch.swept", extra={"path": str(path)})
    return removed


__all__ = ["list_stale_artifacts", "sweep_stale_artifacts"]
