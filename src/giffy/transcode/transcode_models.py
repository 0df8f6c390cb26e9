"""Data structures for conversion jobs."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from ..config import QualityPreset
from ..ingest.ingest_models import UploadedMedia
from ..media.media_models import ArtifactPath


class JobKind(StrEnum):
    THUMBNAIL = "thumbnail"
    GIF = "gif"


class JobStatus(StrEnum):
    """Terminal states of a conversion job."""

    PENDING = "pending"
    DONE = "done"
    TIMEOUT = "timeout"
    FAILED = "failed"


class FailureReason(StrEnum):
    """Failure reasons enumerated in HTTP error bodies."""

    INVALID_REQUEST = "invalid_request"
    MISSING_FILE = "missing_file"
    TOO_MANY_FILES = "too_many_files"
    INVALID_QUALITY = "invalid_quality"
    UNSUPPORTED_MEDIA_TYPE = "unsupported_media_type"
    PAYLOAD_TOO_LARGE = "payload_too_large"
    CONVERSION_TIMEOUT = "conversion_timeout"
    CONVERSION_FAILED = "conversion_failed"
    INTERNAL_ERROR = "internal_error"


@dataclass(slots=True)
class ConversionJob:
    """Per-request bookkeeping: allocated artifacts, preset and outcome."""

    job_id: str
    kind: JobKind
    preset_name: str | None = None
    preset: QualityPreset | None = None
    upload: UploadedMedia | None = None
    artifacts: list[ArtifactPath] = field(default_factory=list)
    status: JobStatus = JobStatus.PENDING
    failure_reason: FailureReason | None = None

    def mark_done(self) -> None:
        self.status = JobStatus.DONE

    def mark_failed(self, reason: FailureReason, *, status: JobStatus = JobStatus.FAILED) -> None:
        self.status = status
        self.failure_reason = reason


@dataclass(slots=True)
class ConversionResult:
    """Standard response from the conversion pipeline."""

    payload: bytes
    content_type: str
    filename: str
