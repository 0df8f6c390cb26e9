from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.giffy.api_errors import register_error_handlers
from src.giffy.config import AppConfig
from src.giffy.health.health_api import router as health_router
from src.giffy.transcode.transcode_api import router, to_http_error
from src.giffy.transcode.transcode_errors import (
    ProcessExecutionError,
    ProcessTimeoutError,
)
from src.giffy.ingest.ingest_errors import PayloadTooLargeError
from src.giffy.transcode.transcode_models import JobKind

VIDEO = ("clip.mp4", b"\x00\x00\x00\x18ftypmp42", "video/mp4")


def build_client(pipeline) -> TestClient:
    app = FastAPI()
    app.state.pipeline = pipeline
    register_error_handlers(app)
    app.include_router(router)
    app.include_router(health_router)
    return TestClient(app, raise_server_exceptions=False)


def test_convert_returns_gif(config, pipeline_factory, runner_factory, list_scratch) -> None:
    client = build_client(pipeline_factory(runner_factory()))

    response = client.post("/convert", data={"quality": "medium"}, files={"video": VIDEO})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/gif")
    assert response.content == b"GIF89a-fake-output"
    assert list_scratch(config.scratch_root) == []


def test_convert_without_quality_uses_default(pipeline_factory, runner_factory) -> None:
    runner = runner_factory()
    client = build_client(pipeline_factory(runner))

    response = client.post("/convert", files={"video": VIDEO})

    assert response.status_code == 200
    assert len(runner.calls) == 2


def test_thumbnail_returns_jpeg(config, pipeline_factory, runner_factory, list_scratch) -> None:
    client = build_client(pipeline_factory(runner_factory()))

    response = client.post("/thumbnail", files={"video": VIDEO})

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("image/jpeg")
    assert list_scratch(config.scratch_root) == []


def test_convert_accepts_very_long_filename(config, pipeline_factory, runner_factory, list_scratch) -> None:
    client = build_client(pipeline_factory(runner_factory()))
    name = "a" * 250 + ".mp4"

    response = client.post("/convert", files={"video": (name, VIDEO[1], "video/mp4")})

    assert response.status_code == 200
    assert response.content == b"GIF89a-fake-output"
    assert f'filename="{"a" * 250}.gif"' in response.headers["content-disposition"]
    assert list_scratch(config.scratch_root) == []


def test_missing_file_returns_400(pipeline_factory, runner_factory) -> None:
    client = build_client(pipeline_factory(runner_factory()))

    for path in ("/convert", "/thumbnail"):
        response = client.post(path, data={"quality": "low"})
        assert response.status_code == 400
        assert response.json()["detail"]["failure_reason"] == "missing_file"


def test_unknown_quality_enumerates_allowed(pipeline_factory, runner_factory, config, list_scratch) -> None:
    runner = runner_factory()
    client = build_client(pipeline_factory(runner))

    response = client.post("/convert", data={"quality": "ultra"}, files={"video": VIDEO})

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["failure_reason"] == "invalid_quality"
    assert sorted(detail["allowed"]) == ["high", "low", "medium"]
    assert runner.calls == []
    assert list_scratch(config.scratch_root) == []


def test_unsupported_type_returns_400(pipeline_factory, runner_factory) -> None:
    runner = runner_factory()
    client = build_client(pipeline_factory(runner))

    response = client.post("/convert", files={"video": ("notes.txt", b"hello", "text/plain")})

    assert response.status_code == 400
    assert response.json()["detail"]["failure_reason"] == "unsupported_media_type"
    assert runner.calls == []


def test_multiple_files_return_400(pipeline_factory, runner_factory) -> None:
    runner = runner_factory()
    client = build_client(pipeline_factory(runner))

    response = client.post("/convert", files=[("video", VIDEO), ("video", VIDEO)])

    assert response.status_code == 400
    assert response.json()["detail"]["failure_reason"] == "too_many_files"
    assert runner.calls == []


def test_oversize_upload_returns_413(scratch_root, pipeline_factory, runner_factory, list_scratch) -> None:
    cfg = AppConfig(scratch_root=scratch_root, max_file_size_bytes=8)
    runner = runner_factory()
    client = build_client(pipeline_factory(runner, cfg))

    response = client.post("/convert", files={"video": ("big.mp4", b"x" * 64, "video/mp4")})

    assert response.status_code == 413
    assert response.json()["detail"]["failure_reason"] == "payload_too_large"
    assert runner.calls == []
    assert list_scratch(scratch_root) == []


def test_timeout_maps_to_408(config, pipeline_factory, runner_factory, list_scratch) -> None:
    runner = runner_factory(fail_on=1, error=ProcessTimeoutError("ffmpeg", 0.01))
    client = build_client(pipeline_factory(runner))

    response = client.post("/convert", files={"video": VIDEO})

    assert response.status_code == 408
    assert response.json()["detail"]["failure_reason"] == "conversion_timeout"
    assert list_scratch(config.scratch_root) == []


def test_execution_failure_maps_to_500_without_leaking_output(
    config, pipeline_factory, runner_factory, list_scratch
) -> None:
    error = ProcessExecutionError(
        "ffmpeg exited with code 1",
        returncode=1,
        output=f"{config.scratch_root}/secret.mp4: Invalid data".encode(),
    )
    client = build_client(pipeline_factory(runner_factory(fail_on=0, error=error)))

    response = client.post("/thumbnail", files={"video": VIDEO})

    assert response.status_code == 500
    body = response.json()["detail"]
    assert body["failure_reason"] == "conversion_failed"
    assert body["message"] == "Failed to generate thumbnail"
    assert str(config.scratch_root) not in response.text
    assert list_scratch(config.scratch_root) == []


def test_payload_too_large_echoes_configured_limit() -> None:
    exc = to_http_error(PayloadTooLargeError(200 * 1024 * 1024, 100 * 1024 * 1024), JobKind.GIF)

    assert exc.status_code == 413
    assert exc.detail["max_size"] == "100MB"
