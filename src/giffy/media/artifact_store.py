"""Scratch storage for per-request conversion artifacts."""

from __future__ import annotations

import logging
import time
import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from ..exceptions import CleanupError
from ..ingest.sanitize import sanitize_filename
from .media_models import ArtifactPath, ArtifactRole

# Client names are cut so a scratch path component stays under 255 bytes.
MAX_STEM_CHARS = 100
MAX_SUFFIX_CHARS = 16

ROLE_SUFFIXES: dict[ArtifactRole, str] = {
    ArtifactRole.PALETTE: ".png",
    ArtifactRole.OUTPUT: ".gif",
    ArtifactRole.THUMBNAIL: ".jpg",
}


@dataclass(slots=True)
class ArtifactStore:
    """Allocates unique scratch paths and deletes them when a request ends.

    Requests never share a path: every name carries a millisecond timestamp
    and a random token, so concurrent writers need no lock. Deletion is
    idempotent and best-effort.
    """

    root: Path
    log: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__))

    def ensure_root(self) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root

    def allocate(self, role: ArtifactRole, base_name: str | None) -> ArtifactPath:
        """Return a fresh path for ``role`` derived from ``base_name``."""
        directory = self.ensure_root()
        safe_name = Path(sanitize_filename(base_name))
        stem = safe_name.stem[:MAX_STEM_CHARS] or "upload"
        if role is ArtifactRole.INPUT:
            suffix = safe_name.suffix[:MAX_SUFFIX_CHARS]
            filename = f"{self._disambiguator()}-{stem}{suffix}"
        else:
            filename = f"{role.value}-{self._disambiguator()}-{stem}{ROLE_SUFFIXES[role]}"
        artifact = ArtifactPath(role=role, path=directory / filename)
        self.log.debug(
            "media.artifact.allocated",
            extra={"role": role.value, "path": str(artifact.path)},
        )
        return artifact

    def release(self, artifacts: Iterable[ArtifactPath]) -> int:
        """Delete every existing artifact and return how many were removed.

        Failures are logged and swallowed; calling this again on the same
        artifacts, or on artifacts that were never written, is a no-op.
        """
        removed = 0
        for artifact in artifacts:
            try:
                if self._remove(artifact):
                    removed += 1
            except CleanupError as exc:
                self.log.error(
                    "media.artifact.cleanup_failed",
                    extra={"role": artifact.role.value, "path": str(artifact.path)},
                    exc_info=exc,
                )
        return removed

    def _remove(self, artifact: ArtifactPath) -> bool:
        path = artifact.path
        try:
            if not path.exists():
                return False
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise CleanupError(f"failed to delete {artifact.role.value} artifact") from exc
        self.log.info(
            "media.artifact.removed",
            extra={"role": artifact.role.value, "path": str(path)},
        )
        return True

    @staticmethod
    def _disambiguator() -> str:
        return f"{time.time_ns() // 1_000_000}-{uuid.uuid4().hex[:12]}"


__all__ = ["ArtifactStore", "ROLE_SUFFIXES", "MAX_STEM_CHARS"]
