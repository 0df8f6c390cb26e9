"""Liveness and readiness probes."""

from __future__ import annotations

import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from ..transcode.pipeline import ConversionPipeline
from ..transcode.transcode_api import get_pipeline

router = APIRouter(tags=["health"])


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
async def health(request: Request) -> dict[str, object]:
    """Report liveness only; no dependency checks."""
    started_at = getattr(request.app.state, "started_at", None)
    uptime = time.monotonic() - started_at if started_at is not None else 0.0
    return {"status": "healthy", "timestamp": _timestamp(), "uptime": round(uptime, 3)}


@router.get("/ready")
async def ready(pipeline: ConversionPipeline = Depends(get_pipeline)) -> JSONResponse:
    """Report readiness based on whether ffmpeg answers a version query."""
    if await pipeline.tool_available():
        return JSONResponse(
            status_code=status.HTTP_200_OK,
            content={"status": "ready", "ffmpeg": "available", "timestamp": _timestamp()},
        )
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not ready", "error": "FFmpeg not available"},
    )
