"""Uniform error envelopes for transport-level failures."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from .transcode.transcode_models import FailureReason

logger = logging.getLogger(__name__)


def invalid_request_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "detail": {
                "status": "error",
                "failure_reason": FailureReason.INVALID_REQUEST.value,
                "message": message,
            }
        },
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Wrap malformed form submissions in the standard error envelope."""
    logger.warning(
        "api.request.invalid",
        extra={"path": request.url.path, "errors": exc.errors()},
    )
    return invalid_request_response("File upload error")


async def body_parse_handler(request: Request, exc: StarletteHTTPException) -> Response:
    """Wrap framework-level body parsing failures; enveloped errors pass through.

    Starlette and FastAPI report an unparsable multipart body as a plain
    400 with a string detail, before any route code runs.
    """
    if exc.status_code != status.HTTP_400_BAD_REQUEST or isinstance(exc.detail, dict):
        return await http_exception_handler(request, exc)
    logger.warning(
        "api.request.body_unparsable",
        extra={"path": request.url.path, "reason": exc.detail},
    )
    return invalid_request_response("File upload error")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort handler; never leaks paths or tracebacks to the client."""
    logger.error("api.request.unhandled", extra={"path": request.url.path}, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": {
                "status": "error",
                "failure_reason": FailureReason.INTERNAL_ERROR.value,
                "message": "Internal server error",
            }
        },
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, body_parse_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


__all__ = ["register_error_handlers", "invalid_request_response"]
