"""Data models for the résumé ingestion pipeline.

Defines the pipeline's stage enum, the transient values that flow between
stages (extracted text, similarity matches, duplicate decisions), the
persisted unit (:class:`StoredRecord`), and the tagged result returned by
:meth:`~src.pipeline.orchestrator.ResumeIngestionPipeline.ingest`.

Stage flow (linear, one external call per arrow):

    Received -> Connected -> TextExtracted -> RecordExtracted -> Summarized
      -> DuplicateChecked -> Stored | SkippedAsDuplicate

Any failure ends in ``Failed``; the raised IngestionError names the stage
that was being entered.
"""

from __future__ import annotations

import uuid
from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

from src.models.employee import EmployeeRecord


class IngestionStage(str, Enum):  # noqa: UP042
    """States of one ``ingest`` call."""

    RECEIVED = "Received"
    CONNECTED = "Connected"                  # Store connection acquired + pinged
    TEXT_EXTRACTED = "TextExtracted"         # PDF bytes -> plain text
    RECORD_EXTRACTED = "RecordExtracted"     # LLM text -> EmployeeRecord(s)
    SUMMARIZED = "Summarized"                # Record -> summary string
    DUPLICATE_CHECKED = "DuplicateChecked"   # Summary embedded + nearest neighbour scored
    STORED = "Stored"                        # Record + summary + embedding written
    SKIPPED_AS_DUPLICATE = "SkippedAsDuplicate"
    FAILED = "Failed"


class DocumentText(BaseModel):
    """Plain text extracted from an uploaded document."""

    model_config = ConfigDict(frozen=True)

    text: str
    page_count: int = Field(default=0, ge=0)


class SimilarityMatch(BaseModel):
    """One nearest-neighbour hit from the record store."""

    model_config = ConfigDict(frozen=True)

    # Cosine similarity in [0, 1]; higher = more similar.
    score: float = Field(ge=0.0, le=1.0)
    record_id: str
    employee_id: str = ""
    summary: str = ""


class DuplicateCheckResult(BaseModel):
    """Outcome of checking one summary against the store."""

    model_config = ConfigDict(frozen=True)

    is_duplicate: bool
    score: float
    threshold: float
    message: str
    nearest_employee_id: str | None = None
    # The query vector; the write path stores it instead of re-embedding.
    embedding: list[float] = Field(default_factory=list, exclude=True, repr=False)


class StoredRecord(BaseModel):
    """The persisted unit: record fields as metadata, summary as indexed text."""

    model_config = ConfigDict(frozen=True)

    record_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    record: EmployeeRecord
    summary: str
    embedding: list[float] = Field(repr=False)


class StoredResult(BaseModel):
    """``ingest`` outcome when the record was novel and has been written."""

    model_config = ConfigDict(frozen=True)

    status: Literal["stored"] = "stored"
    record: EmployeeRecord
    employee_id: str
    record_id: str


class DuplicateResult(BaseModel):
    """``ingest`` outcome when a near-duplicate already exists; nothing written."""

    model_config = ConfigDict(frozen=True)

    status: Literal["duplicate"] = "duplicate"
    score: float
    message: str
    nearest_employee_id: str | None = None


IngestionResult = Annotated[
    Union[StoredResult, DuplicateResult],  # noqa: UP007
    Field(discriminator="status"),
]
