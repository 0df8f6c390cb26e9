"""Data structures for upload intake."""

from dataclasses import dataclass

from ..media.media_models import ArtifactPath


@dataclass(slots=True)
class UploadedMedia:
    """Validated upload persisted to its scratch input path."""

    artifact: ArtifactPath
    content_type: str
    declared_size: int | None
    size_bytes: int
    original_filename: str
    sanitized_filename: str
