"""Pydantic request/response schemas for the resumeVault API.

Defines the public contract for the REST endpoints: résumé upload,
duplicate check, and health.

Convention: request schemas end with "Request", response schemas end with
"Response".  Domain results (:class:`IngestionResult`,
:class:`DuplicateCheckResult`) are returned as-is inside the envelopes.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from src.models.ingestion import DuplicateCheckResult, IngestionResult


class ResumeUploadResponse(BaseModel):
    """Envelope returned after a résumé was processed.

    ``result.status`` tells whether the record was stored or skipped as a
    duplicate.
    """

    status: str = "success"
    message: str
    result: IngestionResult


class DuplicateCheckRequest(BaseModel):
    """A summary to score against the stored records."""

    summary: str = Field(..., min_length=1, max_length=20000)
    threshold: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Similarity score to count as a duplicate; the detector default applies when omitted",
    )


class DuplicateCheckResponse(BaseModel):
    """Outcome of a standalone duplicate check."""

    status: str = "success"
    result: DuplicateCheckResult


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    record_count: int | None = None
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
    stage: str | None = None
