"""Upload validation utilities."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from starlette.datastructures import UploadFile

from ..config import AppConfig, QualityPreset
from ..media.media_models import ArtifactPath
from .ingest_errors import (
    MissingUploadError,
    PayloadTooLargeError,
    TooManyFilesError,
    UnknownPresetError,
    UnsupportedMediaError,
    UploadReadError,
)
from .ingest_models import UploadedMedia
from .sanitize import sanitize_filename

logger = logging.getLogger(__name__)

UPLOAD_FIELD = "video"


@dataclass(slots=True)
class UploadValidator:
    """Validate uploads against configured limits before any processing."""

    config: AppConfig

    def select_upload(
        self,
        files: Sequence[tuple[str, UploadFile]],
        field_name: str = UPLOAD_FIELD,
    ) -> UploadFile:
        """Return the single file sent under ``field_name``."""
        matching = [upload for name, upload in files if name == field_name]
        if not matching:
            raise MissingUploadError("No video file uploaded")
        if len(files) > 1:
            logger.warning(
                "ingest.upload.too_many_files",
                extra={"file_count": len(files)},
            )
            raise TooManyFilesError("Only one file may be uploaded per request")
        return matching[0]

    def resolve_preset(self, name: str | None) -> tuple[str, QualityPreset]:
        """Look up a quality preset; an unknown name is never substituted."""
        presets = self.config.quality_presets
        key = name if name else self.config.default_quality
        try:
            return key, presets[key]
        except KeyError:
            logger.warning("ingest.quality.unknown", extra={"quality": key})
            raise UnknownPresetError(key, list(presets)) from None

    def check_metadata(self, upload: UploadFile) -> None:
        """Reject by declared type and size before anything touches scratch."""
        allowed = tuple(self.config.allowed_content_types)
        if upload.content_type not in allowed:
            logger.warning(
                "ingest.upload.unsupported_media",
                extra={"content_type": upload.content_type},
            )
            raise UnsupportedMediaError(upload.content_type, allowed)

        limit = self.config.max_file_size_bytes
        declared = upload.size
        if declared is not None and declared > limit:
            logger.warning(
                "ingest.upload.payload_too_large",
                extra={"size_bytes": declared, "limit_bytes": limit},
            )
            raise PayloadTooLargeError(declared, limit)

    async def persist(self, upload: UploadFile, target: ArtifactPath) -> UploadedMedia:
        """Stream the upload into ``target`` while enforcing the size cap.

        A partially written file is removed when the cap is exceeded or the
        read fails.
        """
        limit = self.config.max_file_size_bytes
        chunk_size = self.config.upload_chunk_size_bytes
        size = 0
        try:
            await upload.seek(0)
            with target.path.open("wb") as sink:
                while True:
                    chunk = await upload.read(chunk_size)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > limit:
                        raise PayloadTooLargeError(size, limit)
                    sink.write(chunk)
        except PayloadTooLargeError:
            logger.warning(
                "ingest.upload.payload_too_large",
                extra={"size_bytes": size, "limit_bytes": limit},
            )
            with contextlib.suppress(OSError):
                target.path.unlink(missing_ok=True)
            raise
        except OSError as exc:
            logger.error("ingest.upload.read_failed", exc_info=exc)
            with contextlib.suppress(OSError):
                target.path.unlink(missing_ok=True)
            raise UploadReadError("Failed to read uploaded file") from exc

        original = upload.filename or ""
        media = UploadedMedia(
            artifact=target,
            content_type=upload.content_type or "application/octet-stream",
            declared_size=upload.size,
            size_bytes=size,
            original_filename=original,
            sanitized_filename=sanitize_filename(original),
        )
        logger.info(
            "ingest.upload.persisted",
            extra={
                "filename": media.sanitized_filename,
                "size_bytes": media.size_bytes,
                "content_type": media.content_type,
            },
        )
        return media


__all__ = ["UploadValidator", "UPLOAD_FIELD"]
