"""Domain-specific exceptions for upload validation."""

from ..exceptions import GiffyError


class UploadValidationError(GiffyError):
    """Base class for rejected uploads; always surfaced as a 4xx."""


class MissingUploadError(UploadValidationError):
    """Raised when the request carries no video file."""


class TooManyFilesError(UploadValidationError):
    """Raised when more than one file is attached to the request."""


class UnsupportedMediaError(UploadValidationError):
    """Raised when the declared Content-Type is not in the allow-list."""

    def __init__(self, content_type: str | None, allowed: tuple[str, ...]) -> None:
        super().__init__(f"Unsupported content type: {content_type}")
        self.content_type = content_type
        self.allowed = allowed


class PayloadTooLargeError(UploadValidationError):
    """Raised when the upload exceeds the configured size limit."""

    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        super().__init__(f"Upload of {size_bytes} bytes exceeds {limit_bytes} bytes")
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class UnknownPresetError(UploadValidationError):
    """Raised when the requested quality preset does not exist."""

    def __init__(self, name: str, allowed: list[str]) -> None:
        super().__init__(f"Unknown quality preset '{name}'")
        self.name = name
        self.allowed = allowed


class UploadReadError(UploadValidationError):
    """Raised when streaming the upload to scratch storage fails."""
