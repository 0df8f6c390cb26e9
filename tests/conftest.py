from __future__ import annotations

import asyncio
import os
import tempfile
from collections.abc import Sequence
from io import BytesIO
from pathlib import Path

import pytest
from starlette.datastructures import Headers, UploadFile

os.environ.setdefault("GIFFY_SCRATCH_ROOT", tempfile.mkdtemp(prefix="giffy-test-scratch-"))

from src.giffy.config import AppConfig  # noqa: E402
from src.giffy.ingest.validation import UploadValidator  # noqa: E402
from src.giffy.media.artifact_store import ArtifactStore  # noqa: E402
from src.giffy.transcode.pipeline import ConversionPipeline  # noqa: E402
from src.giffy.transcode.process_runner import ProcessResult  # noqa: E402


class FakeRunner:
    """Stands in for ffmpeg: records calls and writes the target file."""

    def __init__(
        self,
        *,
        fail_on: int | None = None,
        error: Exception | None = None,
        write_output: bool = True,
        delay: float | None = None,
    ) -> None:
        self.fail_on = fail_on
        self.error = error
        self.write_output = write_output
        self.delay = delay
        self.calls: list[tuple[list[str], float]] = []

    async def run(self, argv: Sequence[str], timeout_seconds: float) -> ProcessResult:

        command = list(argv)
        self.calls.append((command, timeout_seconds))
        if self.delay is not None:
            await asyncio.sleep(self.delay)
        if self.fail_on is not None and len(self.calls) - 1 == self.fail_on:
            assert self.error is not None
            raise self.error
        if self.write_output and command[-1] != "-version":
            Path(command[-1]).write_bytes(b"GIF89a-fake-output")
        return ProcessResult(argv=tuple(command), returncode=0, output=b"")


def make_upload(
    data: bytes = b"\x00\x00\x00\x18ftypmp42",
    *,
    content_type: str = "video/mp4",
    filename: str = "clip.mp4",
    declared_size: bool = True,
) -> UploadFile:
    return UploadFile(
        file=BytesIO(data),
        filename=filename,
        size=len(data) if declared_size else None,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def scratch_root(tmp_path: Path) -> Path:
    return tmp_path / "scratch"


@pytest.fixture
def config(scratch_root: Path) -> AppConfig:
    return AppConfig(scratch_root=scratch_root)


@pytest.fixture
def upload_factory():
    return make_upload


@pytest.fixture
def runner_factory():
    return FakeRunner


@pytest.fixture
def pipeline_factory(config: AppConfig):
    def build(runner, cfg: AppConfig | None = None) -> ConversionPipeline:
        settings = cfg or config
        return ConversionPipeline(
            config=settings,
            validator=UploadValidator(settings),
            store=ArtifactStore(settings.scratch_root),
            runner=runner,
        )

    return build


def scratch_files(root: Path) -> list[Path]:
    if not root.exists():
        return []
    return sorted(root.iterdir())


@pytest.fixture
def list_scratch():
    return scratch_files
