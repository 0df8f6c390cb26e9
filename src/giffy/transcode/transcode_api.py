"""HTTP routes for thumbnail extraction and GIF conversion."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import Response
from starlette.datastructures import UploadFile
from starlette.formparsers import MultiPartException

from ..exceptions import GiffyError
from ..ingest.ingest_errors import (
    MissingUploadError,
    PayloadTooLargeError,
    TooManyFilesError,
    UnknownPresetError,
    UnsupportedMediaError,
    UploadValidationError,
)
from .pipeline import ConversionPipeline
from .transcode_errors import ConversionTimeoutError
from .transcode_models import ConversionResult, FailureReason, JobKind

router = APIRouter(tags=["transcode"])
logger = logging.getLogger(__name__)

FAILURE_MESSAGES = {
    JobKind.THUMBNAIL: "Failed to generate thumbnail",
    JobKind.GIF: "Video conversion failed",
}


def get_pipeline(request: Request) -> ConversionPipeline:
    """Fetch the conversion pipeline from application state."""
    try:
        return request.app.state.pipeline  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("ConversionPipeline is not configured") from exc


async def collect_files(request: Request) -> list[tuple[str, UploadFile]]:
    """Return every file part of the multipart body with its field name."""
    try:
        form = await request.form()
    except MultiPartException as exc:
        logger.warning("transcode.form.unparsable", extra={"reason": exc.message})
        raise _error(status.HTTP_400_BAD_REQUEST, FailureReason.INVALID_REQUEST, "File upload error") from exc
    return [(key, value) for key, value in form.multi_items() if isinstance(value, UploadFile)]


def _error(status_code: int, reason: FailureReason, message: str, **extra: object) -> HTTPException:
    detail: dict[str, object] = {
        "status": "timeout" if reason is FailureReason.CONVERSION_TIMEOUT else "error",
        "failure_reason": reason.value,
        "message": message,
    }
    detail.update(extra)
    return HTTPException(status_code=status_code, detail=detail)


def to_http_error(exc: GiffyError, kind: JobKind) -> HTTPException:
    """Map a domain error to the HTTP error contract."""
    if isinstance(exc, MissingUploadError):
        return _error(status.HTTP_400_BAD_REQUEST, FailureReason.MISSING_FILE, "No video file uploaded")
    if isinstance(exc, TooManyFilesError):
        return _error(
            status.HTTP_400_BAD_REQUEST,
            FailureReason.TOO_MANY_FILES,
            "Only one video file may be uploaded",
        )
    if isinstance(exc, UnknownPresetError):
        return _error(
            status.HTTP_400_BAD_REQUEST,
            FailureReason.INVALID_QUALITY,
            "Invalid quality setting",
            allowed=list(exc.allowed),
        )
    if isinstance(exc, UnsupportedMediaError):
        return _error(
            status.HTTP_400_BAD_REQUEST,
            FailureReason.UNSUPPORTED_MEDIA_TYPE,
            f"Invalid file type. Allowed types: {', '.join(exc.allowed)}",
            allowed=list(exc.allowed),
        )
    if isinstance(exc, PayloadTooLargeError):
        return _error(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            FailureReason.PAYLOAD_TOO_LARGE,
            "File too large",
            max_size=f"{exc.limit_bytes // (1024 * 1024)}MB",
        )
    if isinstance(exc, ConversionTimeoutError):
        return _error(
            status.HTTP_408_REQUEST_TIMEOUT,
            FailureReason.CONVERSION_TIMEOUT,
            "Conversion timeout",
            details="Video processing took too long. Try a shorter video or lower quality.",
        )
    if isinstance(exc, UploadValidationError):
        return _error(status.HTTP_400_BAD_REQUEST, FailureReason.INVALID_REQUEST, "File upload error")
    return _error(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        FailureReason.CONVERSION_FAILED,
        FAILURE_MESSAGES[kind],
    )


def _binary_response(result: ConversionResult) -> Response:
    return Response(
        content=result.payload,
        media_type=result.content_type,
        headers={"Content-Disposition": f'inline; filename="{result.filename}"'},
    )


@router.post("/thumbnail")
async def create_thumbnail(
    request: Request,
    pipeline: ConversionPipeline = Depends(get_pipeline),
) -> Response:
    """Extract a JPEG thumbnail from the uploaded video."""
    files = await collect_files(request)
    try:
        result = await pipeline.thumbnail(files)
    except GiffyError as exc:
        raise to_http_error(exc, JobKind.THUMBNAIL) from exc
    except Exception as exc:
        logger.exception("transcode.thumbnail.unexpected_error")
        raise _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            FailureReason.INTERNAL_ERROR,
            FAILURE_MESSAGES[JobKind.THUMBNAIL],
        ) from exc
    return _binary_response(result)


@router.post("/convert")
async def convert_video(
    request: Request,
    quality: str | None = Form(None),
    pipeline: ConversionPipeline = Depends(get_pipeline),
) -> Response:
    """Convert the uploaded video into an animated GIF."""
    files = await collect_files(request)
    try:
        result = await pipeline.convert(files, quality)
    except GiffyError as exc:
        raise to_http_error(exc, JobKind.GIF) from exc
    except Exception as exc:
        logger.exception("transcode.convert.unexpected_error")
        raise _error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            FailureReason.INTERNAL_ERROR,
            FAILURE_MESSAGES[JobKind.GIF],
        ) from exc
    return _binary_response(result)
