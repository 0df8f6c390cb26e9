"""Dependency wiring helpers."""

from fastapi import FastAPI

from .api_errors import register_error_handlers
from .config import AppConfig
from .health.health_api import router as health_router
from .ingest.validation import UploadValidator
from .media.artifact_store import ArtifactStore
from .transcode.pipeline import ConversionPipeline
from .transcode.process_runner import ProcessRunner
from .transcode.transcode_api import router as transcode_router


def build_pipeline(config: AppConfig) -> ConversionPipeline:
    """Assemble the conversion pipeline from configuration."""
    store = ArtifactStore(config.scratch_root)
    store.ensure_root()
    return ConversionPipeline(
        config=config,
        validator=UploadValidator(config),
        store=store,
        runner=ProcessRunner(max_output_bytes=config.max_output_bytes),
    )


def include_routers(app: FastAPI, config: AppConfig) -> None:
    """Mount module routers and attach services."""
    pipeline = build_pipeline(config)

    app.state.config = config
    app.state.pipeline = pipeline

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(transcode_router)
