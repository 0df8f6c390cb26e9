"""Scratch artifact data models."""

from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path


class ArtifactRole(StrEnum):
    """Role an artifact plays within one conversion request."""

    INPUT = "input"
    PALETTE = "palette"
    OUTPUT = "output"
    THUMBNAIL = "thumbnail"


@dataclass(frozen=True, slots=True)
class ArtifactPath:
    """Scratch file location tagged with its role."""

    role: ArtifactRole
    path: Path

    def exists(self) -> bool:
        return self.path.exists()
