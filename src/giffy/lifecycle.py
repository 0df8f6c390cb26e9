"""Lifecycle helpers wiring background tasks for FastAPI startup."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import time
from collections.abc import AsyncIterator
from pathlib import Path

from fastapi import FastAPI

from .media.scratch_cleanup import sweep_stale_artifacts

logger = logging.getLogger(__name__)


async def run_periodic_scratch_sweep(
    *,
    root: Path,
    ttl_seconds: float,
    shutdown_event: asyncio.Event,
    interval_seconds: float = 900.0,
) -> None:
    """Sweep stale scratch files until ``shutdown_event`` is signalled."""

    interval = max(0.01, float(interval_seconds))
    while not shutdown_event.is_set():
        try:
            removed = await asyncio.to_thread(sweep_stale_artifacts, root, ttl_seconds)
        except Exception:  # pragma: no cover - defensive logging
            logger.exception("Scratch sweep iteration failed")
        else:
            if removed:
                logger.info("Swept %s stale scratch artifacts", removed)
        try:
            await asyncio.wait_for(shutdown_event.wait(), timeout=interval)
        except asyncio.TimeoutError:
            continue


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Start the scratch sweeper on startup and stop it on shutdown."""

    config = app.state.config
    app.state.started_at = time.monotonic()
    task: asyncio.Task[None] | None = None
    shutdown_event = asyncio.Event()
    if getattr(app.state, "disable_scratch_sweep", False):
        logger.info("Scratch sweep startup skipped: disabled via app state")
    else:
        task = asyncio.create_task(
            run_periodic_scratch_sweep(
                root=config.scratch_root,
                ttl_seconds=config.scratch_ttl_seconds,
                shutdown_event=shutdown_event,
                interval_seconds=config.scratch_sweep_interval_seconds,
            ),
            name="giffy-scratch-sweep",
        )
    try:
        yield
    finally:
        shutdown_event.set()
        if task is not None:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


__all__ = ["lifespan", "run_periodic_scratch_sweep"]
