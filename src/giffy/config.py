"""Application configuration for Giffy.

Limits, the MIME allow-list and quality presets are assembled once at startup
and handed to components read-only. Values can be overridden through
``GIFFY_*`` environment variables.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024

DEFAULT_ALLOWED_CONTENT_TYPES: Tuple[str, ...] = (
    "video/mp4",
    "video/quicktime",
    "video/x-msvideo",
    "video/x-matroska",
    "video/webm",
    "video/mpeg",
)


class QualityPreset(BaseModel):
    """Encoding parameters for one GIF quality tier."""

    model_config = ConfigDict(frozen=True)

    fps: int = Field(gt=0, description="Output frame rate.")
    width: int = Field(gt=0, description="Output width in pixels; height keeps aspect.")
    colors: int = Field(
        ge=2, le=256, description="Upper bound for the generated palette size."
    )


def _default_presets() -> Dict[str, QualityPreset]:
    return {
        "low": QualityPreset(fps=10, width=320, colors=128),
        "medium": QualityPreset(fps=15, width=480, colors=256),
        "high": QualityPreset(fps=20, width=640, colors=256),
    }


def _default_scratch_root() -> Path:
    return Path("./var/scratch")


class AppConfig(BaseSettings):
    """Immutable service configuration."""

    model_config = SettingsConfigDict(env_prefix="GIFFY_", frozen=True)

    scratch_root: Path = Field(
        default_factory=_default_scratch_root,
        description="Directory holding per-request scratch artifacts.",
    )
    max_file_size_bytes: int = Field(
        default=100 * MIB,
        ge=1,
        description="Largest accepted upload in bytes.",
    )
    upload_chunk_size_bytes: int = Field(
        default=1 * MIB,
        ge=1,
        description="Chunk size used while streaming uploads to disk.",
    )
    allowed_content_types: Tuple[str, ...] = Field(
        default=DEFAULT_ALLOWED_CONTENT_TYPES,
        description="Declared MIME types accepted for upload.",
    )
    ffmpeg_binary: str = Field(
        default="ffmpeg",
        min_length=1,
        description="Executable name or path of the transcoding tool.",
    )
    ffmpeg_timeout_seconds: float = Field(
        default=120.0,
        gt=0,
        description="Timeout budget for GIF encoding; palette stage gets half.",
    )
    thumbnail_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for single-frame thumbnail extraction.",
    )
    thumbnail_width: int = Field(default=320, gt=0)
    thumbnail_seek: str = Field(default="00:00:01")
    readiness_timeout_seconds: float = Field(
        default=5.0,
        gt=0,
        description="Timeout for the readiness version probe.",
    )
    max_output_bytes: int = Field(
        default=50 * MIB,
        ge=1,
        description="Bound on combined stdout/stderr captured from the tool.",
    )
    quality_presets: Dict[str, QualityPreset] = Field(default_factory=_default_presets)
    default_quality: str = Field(default="medium")
    scratch_ttl_seconds: int = Field(
        default=60 * 60,
        ge=1,
        description="Age after which stranded scratch files are swept.",
    )
    scratch_sweep_interval_seconds: float = Field(
        default=15 * 60,
        gt=0,
        description="Interval between background scratch sweeps.",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level name, e.g. DEBUG or WARNING.",
    )

    @field_validator("log_level")
    @classmethod
    def _log_level_known(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level '{value}'")
        return level

    @field_validator("default_quality")
    @classmethod
    def _default_quality_known(cls, value: str, info: ValidationInfo) -> str:
        presets = info.data.get("quality_presets") or {}
        if presets and value not in presets:
            raise ValueError(f"default_quality '{value}' is not a configured preset")
        return value

    @property
    def palette_timeout_seconds(self) -> float:
        return self.ffmpeg_timeout_seconds / 2

    @property
    def max_file_size_mb(self) -> int:
        return self.max_file_size_bytes // MIB


def load_config() -> AppConfig:
    """Build configuration from the environment and prepare the scratch root."""
    config = AppConfig()
    config.scratch_root.mkdir(parents=True, exist_ok=True)
    return config


__all__ = ["AppConfig", "QualityPreset", "load_config", "DEFAULT_ALLOWED_CONTENT_TYPES", "MIB"]
