"""Exceptions raised by the process runner and the conversion pipeline."""

from __future__ import annotations

from ..exceptions import GiffyError


class ProcessError(GiffyError):
    """Base class for external process failures."""


class ProcessTimeoutError(ProcessError):
    """Raised when the process does not finish before its deadline."""

    def __init__(self, program: str, timeout_seconds: float) -> None:
        super().__init__(f"{program} did not finish within {timeout_seconds:.1f}s")
        self.program = program
        self.timeout_seconds = timeout_seconds


class ProcessExecutionError(ProcessError):
    """Raised when the process cannot start or exits with a non-zero code."""

    def __init__(self, message: str, *, returncode: int | None = None, output: bytes = b"") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.output = output

    def output_tail(self, limit: int = 4096) -> str:
        return self.output[-limit:].decode("utf-8", errors="replace")


class OutputOverflowError(ProcessExecutionError):
    """Raised when captured output exceeds the configured bound."""

    def __init__(self, size_bytes: int, limit_bytes: int) -> None:
        super().__init__(f"process output exceeded {limit_bytes} bytes")
        self.size_bytes = size_bytes
        self.limit_bytes = limit_bytes


class ConversionError(GiffyError):
    """Base class for terminal pipeline failures."""


class ConversionTimeoutError(ConversionError):
    """Raised when a transcoding stage exceeds its time budget."""

    def __init__(self, stage: str, timeout_seconds: float) -> None:
        super().__init__(f"stage '{stage}' timed out after {timeout_seconds:.1f}s")
        self.stage = stage
        self.timeout_seconds = timeout_seconds


class ConversionFailedError(ConversionError):
    """Raised when a transcoding stage fails for any other reason."""

    def __init__(self, stage: str, message: str = "conversion failed") -> None:
        super().__init__(f"stage '{stage}': {message}")
        self.stage = stage
