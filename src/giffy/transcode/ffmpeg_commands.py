"""Argument vectors for the ffmpeg invocations used by the pipeline.

Every builder returns a list suitable for ``create_subprocess_exec``; no
shell is involved. Paths come from the artifact store and are already
restricted to ``[A-Za-z0-9._-]`` in their final component.
"""

from __future__ import annotations

from pathlib import Path

from ..config import QualityPreset

COMMON_FLAGS = ("-hide_banner", "-nostdin", "-loglevel", "error")


def version_command(binary: str) -> list[str]:
    return [binary, "-version"]


def thumbnail_command(
    binary: str,
    source: Path,
    target: Path,
    *,
    seek: str = "00:00:01",
    width: int = 320,
) -> list[str]:
    """Extract one frame at ``seek`` scaled to ``width`` pixels."""
    return [
        binary,
        *COMMON_FLAGS,
        "-i",
        str(source),
        "-ss",
        seek,
        "-frames:v",
        "1",
        "-vf",
        f"scale={width}:-1",
        "-y",
        str(target),
    ]


def scale_filter(preset: QualityPreset) -> str:
    return f"fps={preset.fps},scale={preset.width}:-1:flags=lanczos"


def palette_command(binary: str, source: Path, palette: Path, preset: QualityPreset) -> list[str]:
    """Stage 1: generate a palette tailored to the downsampled frames."""
    return [
        binary,
        *COMMON_FLAGS,
        "-i",
        str(source),
        "-vf",
        f"{scale_filter(preset)},palettegen=max_colors={preset.colors}",
        "-y",
        str(palette),
    ]


def encode_command(
    binary: str,
    source: Path,
    palette: Path,
    target: Path,
    preset: QualityPreset,
) -> list[str]:
    """Stage 2: encode the GIF through the palette produced by stage 1."""
    return [
        binary,
        *COMMON_FLAGS,
        "-i",
        str(source),
        "-i",
        str(palette),
        "-lavfi",
        f"{scale_filter(preset)}[x];[x][1:v]paletteuse",
        "-y",
        str(target),
    ]


__all__ = [
    "COMMON_FLAGS",
    "encode_command",
    "palette_command",
    "scale_filter",
    "thumbnail_command",
    "version_command",
]
