"""FastAPI API routes for resumeVault.

Provides REST endpoints for résumé upload, standalone duplicate checks and
health.  Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

Endpoint                          Method  Description
/api/v1/resumes                   POST    Upload PDF -> extract -> dedupe -> store
/api/v1/resumes/duplicate-check   POST    Score a summary against stored records
/api/v1/health                    GET     Health check + record count + providers

Service failures raised from the pipeline are turned into JSON errors by
:class:`~src.api.middleware.ErrorHandlingMiddleware`.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile

from src.api.schemas import (
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    ErrorResponse,
    HealthResponse,
    ResumeUploadResponse,
)
from src.interfaces.record_store_provider import IRecordStoreProvider
from src.models.ingestion import StoredResult
from src.pipeline.orchestrator import ResumeIngestionPipeline, store_session
from src.services.duplicate_detector import DuplicateDetector
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_PDF_CONTENT_TYPE = "application/pdf"

# Read uploads in 64 KB increments so oversized files are rejected before
# they are fully buffered.
_UPLOAD_CHUNK_SIZE = 64 * 1024

_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------


def _get_pipeline(request: Request) -> ResumeIngestionPipeline:
    return request.app.state.pipeline


def _get_detector(request: Request) -> DuplicateDetector:
    return request.app.state.duplicate_detector


def _get_record_store(request: Request) -> IRecordStoreProvider:
    return request.app.state.record_store


def _get_max_upload_bytes(request: Request) -> int:
    return request.app.state.max_upload_bytes


PipelineDep = Annotated[ResumeIngestionPipeline, Depends(_get_pipeline)]
DetectorDep = Annotated[DuplicateDetector, Depends(_get_detector)]
RecordStoreDep = Annotated[IRecordStoreProvider, Depends(_get_record_store)]
MaxUploadDep = Annotated[int, Depends(_get_max_upload_bytes)]


# ---------------------------------------------------------------------------
# Résumé endpoints
# ---------------------------------------------------------------------------


@router.post(
    "/resumes",
    response_model=ResumeUploadResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Upload a PDF résumé to extract, deduplicate and store",
)
async def upload_resume(
    pipeline: PipelineDep,
    max_upload_bytes: MaxUploadDep,
    pdf: Annotated[UploadFile | None, File()] = None,
) -> ResumeUploadResponse:
    """Accept one PDF résumé and run it through the ingestion pipeline."""
    if pdf is None or (pdf.content_type or "") != _PDF_CONTENT_TYPE:
        raise HTTPException(status_code=400, detail="No valid PDF uploaded")

    chunks: list[bytes] = []
    total_size = 0
    while True:
        chunk = await pdf.read(_UPLOAD_CHUNK_SIZE)
        if not chunk:
            break
        total_size += len(chunk)
        if total_size > max_upload_bytes:
            raise HTTPException(
                status_code=413,
                detail=f"File too large. Maximum: {max_upload_bytes} bytes.",
            )
        chunks.append(chunk)
    document_bytes = b"".join(chunks)

    _logger.info("resume_upload_received", filename=pdf.filename, size_bytes=total_size)
    result = await pipeline.ingest(document_bytes)

    if isinstance(result, StoredResult):
        message = "Resume processed and stored."
    else:
        message = "Resume processed; a near-duplicate already exists."
    return ResumeUploadResponse(message=message, result=result)


@router.post(
    "/resumes/duplicate-check",
    response_model=DuplicateCheckResponse,
    responses={502: {"model": ErrorResponse}},
    summary="Check a summary against stored employee records",
)
async def check_duplicate(
    body: DuplicateCheckRequest,
    detector: DetectorDep,
    record_store: RecordStoreDep,
) -> DuplicateCheckResponse:
    """Score *summary* against its nearest stored summary."""
    async with store_session(record_store) as store:
        result = await detector.check_duplicate(
            body.summary, threshold=body.threshold, store=store
        )
    return DuplicateCheckResponse(result=result)


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health_check(request: Request, record_store: RecordStoreDep) -> HealthResponse:
    """Return application health, version, record count and providers."""
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    record_count: int | None = None
    try:
        async with store_session(record_store):
            record_count = await record_store.count()
    except Exception as exc:
        _logger.warning("health_store_unavailable", error=str(exc))

    status = "healthy" if record_count is not None else "degraded"
    return HealthResponse(
        status=status,
        version=_VERSION,
        record_count=record_count,
        providers=providers,
    )
