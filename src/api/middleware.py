"""API middleware: CORS, request logging, and error handling.

Provides helper functions and middleware classes to configure cross-origin
resource sharing, structured request logging (via structlog), and automatic
conversion of ``ResumeVaultError`` subclasses into JSON ``ErrorResponse``
bodies.

Starlette middleware is a stack (last added, first executed).  main.py adds
ErrorHandlingMiddleware before RequestLoggingMiddleware, so the logger sees
the final status code after errors have been converted.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from src.api.schemas import ErrorResponse
from src.utils.errors import ConfigurationError, IngestionError, ResumeVaultError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Allow browser front-ends to call the API.

    With no explicit *allowed_origins* any origin may call, but without
    credentials; browsers refuse credentialed requests to a ``*`` origin.
    """
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["Content-Type"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status, duration and body size.

    The declared body size shows how large a rejected upload was.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
                content_length=request.headers.get("content-length"),
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


def status_code_for(exc: ResumeVaultError) -> int:
    """Map an application error to its HTTP status.

    Bad documents are the client's fault (422); everything else raised by
    the pipeline is an upstream service failure (502).  Misconfiguration
    is a server fault (500).
    """
    if isinstance(exc, IngestionError):
        if exc.is_input_error:
            return 422
        if isinstance(exc.cause, ConfigurationError):
            return 500
        return 502
    if isinstance(exc, ConfigurationError):
        return 500
    return 502


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Catch ``ResumeVaultError`` subclasses and return structured JSON errors.

    Stack traces are logged server-side only; the client sees the error
    class name, its message and, for ingestion failures, the stage.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except ResumeVaultError as exc:
            stage = exc.stage if isinstance(exc, IngestionError) else None
            error_type = type(exc).__name__
            if isinstance(exc, IngestionError):
                error_type = type(exc.cause).__name__

            status_code = status_code_for(exc)
            _logger.error(
                "application_error",
                error_type=error_type,
                message=exc.message,
                provider=exc.provider_name,
                stage=stage,
                status=status_code,
                path=str(request.url.path),
            )
            body = ErrorResponse(error=error_type, detail=exc.message, stage=stage)
            return JSONResponse(status_code=status_code, content=body.model_dump())
