"""Thumbnail and GIF conversion workflows.

Each request runs inside :meth:`ConversionPipeline._job`, which owns every
artifact allocated for it and releases them in ``finally``: after success,
after any error, after a stage timeout and when the request task is
cancelled because the client went away. The result bytes are read into
memory before the scope closes, so nothing remains in scratch storage once
the handler builds its response.
"""

from __future__ import annotations

import asyncio
import uuid
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path

import structlog
from starlette.datastructures import UploadFile

from ..config import AppConfig
from ..ingest.ingest_errors import UploadValidationError
from ..ingest.validation import UploadValidator
from ..media.artifact_store import ArtifactStore
from ..media.media_models import ArtifactPath, ArtifactRole
from . import ffmpeg_commands
from .process_runner import ProcessRunner
from .transcode_errors import (
    ConversionFailedError,
    ConversionTimeoutError,
    ProcessError,
    ProcessExecutionError,
    ProcessTimeoutError,
)
from .transcode_models import (
    ConversionJob,
    ConversionResult,
    FailureReason,
    JobKind,
    JobStatus,
)

logger = structlog.get_logger(__name__)

GIF_CONTENT_TYPE = "image/gif"
THUMBNAIL_CONTENT_TYPE = "image/jpeg"


@dataclass(slots=True)
class ConversionPipeline:
    """Coordinates validation, scratch artifacts and ffmpeg stages."""

    config: AppConfig
    validator: UploadValidator
    store: ArtifactStore
    runner: ProcessRunner
    log: structlog.stdlib.BoundLogger = field(default_factory=lambda: logger)

    async def thumbnail(self, files: Sequence[tuple[str, UploadFile]]) -> ConversionResult:
        """Extract a single JPEG frame one second into the upload."""
        upload = self.validator.select_upload(files)
        self.validator.check_metadata(upload)

        async with self._job(JobKind.THUMBNAIL) as job:
            source = await self._persist_input(job, upload)
            thumbnail = self._allocate(job, ArtifactRole.THUMBNAIL, job.upload.sanitized_filename)
            command = ffmpeg_commands.thumbnail_command(
                self.config.ffmpeg_binary,
                source.path,
                thumbnail.path,
                seek=self.config.thumbnail_seek,
                width=self.config.thumbnail_width,
            )
            await self._run_stage(job, "thumbnail", command, self.config.thumbnail_timeout_seconds)
            payload = await self._read_result(job, "thumbnail", thumbnail)
            job.mark_done()
            return ConversionResult(
                payload=payload,
                content_type=THUMBNAIL_CONTENT_TYPE,
                filename=f"thumb-{Path(job.upload.sanitized_filename).stem or 'upload'}.jpg",
            )

    async def convert(
        self,
        files: Sequence[tuple[str, UploadFile]],
        quality: str | None = None,
    ) -> ConversionResult:
        """Encode the upload as a GIF using a two-pass palette workflow."""
        upload = self.validator.select_upload(files)
        preset_name, preset = self.validator.resolve_preset(quality)
        self.validator.check_metadata(upload)

        async with self._job(JobKind.GIF) as job:
            job.preset_name = preset_name
            job.preset = preset
            source = await self._persist_input(job, upload)
            palette = self._allocate(job, ArtifactRole.PALETTE, job.upload.sanitized_filename)
            output = self._allocate(job, ArtifactRole.OUTPUT, job.upload.sanitized_filename)
            binary = self.config.ffmpeg_binary

            self.log.info(
                "transcode.convert.start",
                quality=preset_name,
                size_bytes=job.upload.size_bytes,
            )
            await self._run_stage(
                job,
                "palette",
                ffmpeg_commands.palette_command(binary, source.path, palette.path, preset),
                self.config.palette_timeout_seconds,
            )
            if not palette.exists():
                job.mark_failed(FailureReason.CONVERSION_FAILED)
                raise ConversionFailedError("palette", "palette was not produced")
            await self._run_stage(
                job,
                "encode",
                ffmpeg_commands.encode_command(binary, source.path, palette.path, output.path, preset),
                self.config.ffmpeg_timeout_seconds,
            )
            payload = await self._read_result(job, "encode", output)
            job.mark_done()
            self.log.info("transcode.convert.done", quality=preset_name, output_bytes=len(payload))
            return ConversionResult(
                payload=payload,
                content_type=GIF_CONTENT_TYPE,
                filename=f"{Path(job.upload.sanitized_filename).stem or 'upload'}.gif",
            )

    async def tool_available(self) -> bool:
        """Return ``True`` when the transcoding tool answers a version query."""
        command = ffmpeg_commands.version_command(self.config.ffmpeg_binary)
        try:
            await self.runner.run(command, self.config.readiness_timeout_seconds)
        except ProcessError as exc:
            self.log.warning("transcode.tool.unavailable", error=str(exc))
            return False
        return True

    @asynccontextmanager
    async def _job(self, kind: JobKind) -> AsyncIterator[ConversionJob]:
        job = ConversionJob(job_id=uuid.uuid4().hex, kind=kind)
        with structlog.contextvars.bound_contextvars(job_id=job.job_id, kind=kind.value):
            try:
                yield job
            except UploadValidationError:
                job.mark_failed(FailureReason.INVALID_REQUEST)
                raise
            except asyncio.CancelledError:
                job.mark_failed(FailureReason.INTERNAL_ERROR)
                self.log.info("transcode.job.cancelled")
                raise
            except Exception:
                if job.status is JobStatus.PENDING:
                    job.mark_failed(FailureReason.INTERNAL_ERROR)
                raise
            finally:
                removed = self.store.release(job.artifacts)
                self.log.info(
                    "transcode.job.finished",
                    status=job.status.value,
                    failure_reason=job.failure_reason.value if job.failure_reason else None,
                    artifacts_removed=removed,
                )

    def _allocate(self, job: ConversionJob, role: ArtifactRole, base_name: str) -> ArtifactPath:
        artifact = self.store.allocate(role, base_name)
        job.artifacts.append(artifact)
        return artifact

    async def _persist_input(self, job: ConversionJob, upload: UploadFile) -> ArtifactPath:
        source = self._allocate(job, ArtifactRole.INPUT, upload.filename or "")
        job.upload = await self.validator.persist(upload, source)
        return source

    async def _run_stage(
        self,
        job: ConversionJob,
        stage: str,
        command: list[str],
        timeout_seconds: float,
    ) -> None:
        self.log.info("transcode.stage.start", stage=stage, timeout_seconds=timeout_seconds)
        try:
            await self.runner.run(command, timeout_seconds)
        except ProcessTimeoutError as exc:
            job.mark_failed(FailureReason.CONVERSION_TIMEOUT, status=JobStatus.TIMEOUT)
            self.log.warning("transcode.stage.timeout", stage=stage, timeout_seconds=timeout_seconds)
            raise ConversionTimeoutError(stage, timeout_seconds) from exc
        except ProcessExecutionError as exc:
            job.mark_failed(FailureReason.CONVERSION_FAILED)
            self.log.error(
                "transcode.stage.failed",
                stage=stage,
                returncode=exc.returncode,
                output=exc.output_tail(),
            )
            raise ConversionFailedError(stage) from exc
        self.log.info("transcode.stage.done", stage=stage)

    async def _read_result(self, job: ConversionJob, stage: str, artifact: ArtifactPath) -> bytes:
        try:
            return await asyncio.to_thread(artifact.path.read_bytes)
        except FileNotFoundError as exc:
            job.mark_failed(FailureReason.CONVERSION_FAILED)
            self.log.error("transcode.stage.no_output", stage=stage, role=artifact.role.value)
            raise ConversionFailedError(stage, "no output was produced") from exc


__all__ = ["ConversionPipeline", "GIF_CONTENT_TYPE", "THUMBNAIL_CONTENT_TYPE"]
