"""Orchestrator for single-résumé ingestion.

Takes the raw bytes of one PDF résumé and drives it through text
extraction, record extraction, summarisation and the duplicate check, then
either stores the record or skips it as a duplicate.

Stage flow (linear; each arrow is one awaited call):

    Received -> Connected -> TextExtracted -> RecordExtracted -> Summarized
             -> DuplicateChecked -> Stored | SkippedAsDuplicate

Any failure moves to ``Failed`` and surfaces as :class:`IngestionError`
tagged with the stage that was being entered.  The only write is the final
single insert, so a failure at any stage leaves the store untouched.

The record store is acquired once per ``ingest`` call through
:func:`store_session` and released on every exit path.
"""

from __future__ import annotations

import contextlib
import uuid
from collections.abc import AsyncIterator

import structlog

from src.interfaces.document_provider import IDocumentTextProvider
from src.interfaces.record_store_provider import IRecordStoreProvider
from src.models.ingestion import (
    DuplicateResult,
    IngestionStage,
    StoredRecord,
    StoredResult,
)
from src.services.duplicate_detector import DuplicateDetector
from src.services.record_extractor import RecordExtractor
from src.services.summary_generator import SummaryGenerator
from src.utils.errors import (
    ExtractionSchemaError,
    ExtractionTextError,
    IngestionError,
    StoreConnectionError,
)
from src.utils.logging import bind_ingestion_context, get_logger


@contextlib.asynccontextmanager
async def store_session(store: IRecordStoreProvider) -> AsyncIterator[IRecordStoreProvider]:
    """Open one session on *store*, confirm it answers, and always close it.

    ``close`` is paired only with a successful ``connect``, so a failed
    attempt never releases a session held by a concurrent caller.

    Raises
    ------
    StoreConnectionError
        If the connection cannot be opened or the liveness ping fails.
    """
    await store.connect()
    try:
        if not await store.ping():
            raise StoreConnectionError(
                message="Record store did not answer the liveness ping",
                provider_name=store.get_provider_name(),
            )
        yield store
    finally:
        await store.close()


class ResumeIngestionPipeline:
    """Ingests résumés into the record store.

    All collaborators are injected; the pipeline creates none of them.  Each
    ``ingest`` call opens its own store session and runs the duplicate query
    and the write through it, so concurrent calls on one pipeline are safe.
    """

    def __init__(
        self,
        document_provider: IDocumentTextProvider,
        record_extractor: RecordExtractor,
        summary_generator: SummaryGenerator,
        duplicate_detector: DuplicateDetector,
        record_store: IRecordStoreProvider,
        duplicate_threshold: float = 0.98,
    ) -> None:
        if not 0.0 <= duplicate_threshold <= 1.0:
            raise ValueError(
                f"duplicate_threshold must be between 0 and 1, got {duplicate_threshold}"
            )
        self._document_provider = document_provider
        self._record_extractor = record_extractor
        self._summary_generator = summary_generator
        self._duplicate_detector = duplicate_detector
        self._record_store = record_store
        self._duplicate_threshold = duplicate_threshold
        self._logger: structlog.BoundLogger = get_logger(__name__)

    @property
    def duplicate_threshold(self) -> float:
        return self._duplicate_threshold

    async def ingest(self, document_bytes: bytes) -> StoredResult | DuplicateResult:
        """Ingest one PDF résumé.

        Returns
        -------
        StoredResult | DuplicateResult
            ``status="stored"`` with the new record id, or
            ``status="duplicate"`` with the similarity score when the
            résumé matches an existing record.

        Raises
        ------
        IngestionError
            On any failure.  ``stage`` is the stage being entered and
            ``cause`` the underlying exception.
        """
        ingestion_id = uuid.uuid4().hex
        with bind_ingestion_context(ingestion_id):
            self._logger.info(
                "resume_ingest_start",
                stage=IngestionStage.RECEIVED.value,
                size_bytes=len(document_bytes),
            )
            stage = IngestionStage.CONNECTED
            try:
                async with store_session(self._record_store) as store:
                    stage = IngestionStage.TEXT_EXTRACTED
                    document = await self._document_provider.extract(document_bytes)
                    text = document.text.strip()
                    if not text:
                        raise ExtractionTextError(
                            message="No extractable text in document",
                            provider_name=self._document_provider.get_provider_name(),
                        )

                    stage = IngestionStage.RECORD_EXTRACTED
                    records = await self._record_extractor.extract(text)
                    if not records:
                        raise ExtractionSchemaError(message="No employee record extracted")
                    record = records[0]
                    if len(records) > 1:
                        self._logger.warning(
                            "extra_records_ignored",
                            kept_employee_id=record.employee_id,
                            ignored=len(records) - 1,
                        )

                    stage = IngestionStage.SUMMARIZED
                    summary = await self._summary_generator.summarize(record)

                    stage = IngestionStage.DUPLICATE_CHECKED
                    check = await self._duplicate_detector.check_duplicate(
                        summary, threshold=self._duplicate_threshold, store=store
                    )

                    if check.is_duplicate:
                        self._logger.info(
                            "resume_ingest_skipped",
                            stage=IngestionStage.SKIPPED_AS_DUPLICATE.value,
                            employee_id=record.employee_id,
                            score=round(check.score, 4),
                            nearest_employee_id=check.nearest_employee_id,
                        )
                        return DuplicateResult(
                            score=check.score,
                            message=check.message,
                            nearest_employee_id=check.nearest_employee_id,
                        )

                    stage = IngestionStage.STORED
                    stored = StoredRecord(
                        record=record,
                        summary=summary,
                        embedding=check.embedding,
                    )
                    await store.insert_records([stored])
                    self._logger.info(
                        "record_stored",
                        stage=IngestionStage.STORED.value,
                        employee_id=record.employee_id,
                        record_id=stored.record_id,
                    )
                    return StoredResult(
                        record=record,
                        employee_id=record.employee_id,
                        record_id=stored.record_id,
                    )
            except Exception as exc:
                self._logger.error(
                    "resume_ingest_failed",
                    stage=IngestionStage.FAILED.value,
                    failed_stage=stage.value,
                    error=str(exc),
                )
                raise IngestionError(stage=stage.value, cause=exc) from exc
