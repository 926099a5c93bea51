"""Near-duplicate detection for employee summaries.

A summary is embedded once and compared with the single nearest stored
summary.  The resulting :class:`DuplicateCheckResult` carries that
embedding so the ingestion pipeline can store it without a second
embedding call.

:class:`DuplicateCheckTool` exposes the same check to tool-calling LLM
agents under the name ``duplicate_resume_check``.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.record_store_provider import IRecordStoreProvider
from src.models.ingestion import DuplicateCheckResult
from src.utils.errors import ResumeVaultError, SimilarityServiceError
from src.utils.logging import get_logger

DEFAULT_DUPLICATE_THRESHOLD = 0.90

DUPLICATE_MESSAGE = "This resume is very similar to an existing entry."
UNIQUE_MESSAGE = "No similar resume found."


class DuplicateDetector:
    """Scores a summary against the nearest stored summary."""

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        record_store: IRecordStoreProvider,
        default_threshold: float = DEFAULT_DUPLICATE_THRESHOLD,
    ) -> None:
        _validate_threshold(default_threshold)
        self._embedding = embedding_provider
        self._store = record_store
        self._default_threshold = default_threshold
        self._logger = get_logger(__name__)

    @property
    def default_threshold(self) -> float:
        return self._default_threshold

    async def check_duplicate(
        self,
        summary: str,
        threshold: float | None = None,
        store: IRecordStoreProvider | None = None,
    ) -> DuplicateCheckResult:
        """Decide whether *summary* duplicates a stored record.

        The comparison is inclusive: a score equal to the threshold counts
        as a duplicate.  An empty store scores 0.0.  *store* is the handle
        of an open session; the store given at construction is used when
        it is omitted.

        Raises
        ------
        ValueError
            If *threshold* lies outside [0, 1].
        SimilarityServiceError
            If embedding or the store query fails.
        """
        effective = self._default_threshold if threshold is None else threshold
        _validate_threshold(effective)

        try:
            embedding = await self._embedding.embed_single(summary)
        except ResumeVaultError:
            raise
        except Exception as exc:
            raise SimilarityServiceError(
                message=f"Embedding failed: {exc}",
                provider_name=self._embedding.get_provider_name(),
            ) from exc

        target = store if store is not None else self._store
        matches = await target.query_by_embedding(embedding, top_k=1)
        top = matches[0] if matches else None
        score = top.score if top is not None else 0.0
        is_duplicate = score >= effective

        self._logger.info(
            "duplicate_check_complete",
            score=round(score, 4),
            threshold=effective,
            duplicate=is_duplicate,
            nearest_employee_id=top.employee_id if top is not None else None,
        )

        return DuplicateCheckResult(
            is_duplicate=is_duplicate,
            score=score,
            threshold=effective,
            message=DUPLICATE_MESSAGE if is_duplicate else UNIQUE_MESSAGE,
            nearest_employee_id=top.employee_id if top is not None else None,
            embedding=embedding,
        )


def _validate_threshold(threshold: float) -> None:
    if not 0.0 <= threshold <= 1.0:
        raise ValueError(f"threshold must be between 0 and 1, got {threshold}")


class DuplicateCheckArguments(BaseModel):
    """Arguments accepted by :class:`DuplicateCheckTool`."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    resume_summary: str = Field(
        description="A cleaned, summarized version of the resume (not the raw text)"
    )
    threshold: float | None = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Similarity score threshold to count as a duplicate",
    )


class DuplicateCheckTool:
    """Agent-callable wrapper around :meth:`DuplicateDetector.check_duplicate`.

    Adds no default of its own: an omitted threshold reaches the detector
    as ``None``.
    """

    name = "duplicate_resume_check"
    description = (
        "Checks if a given resume is a near-duplicate of an existing "
        "employee in the database"
    )

    def __init__(self, detector: DuplicateDetector) -> None:
        self._detector = detector

    @property
    def parameters(self) -> dict[str, Any]:
        """JSON schema of the tool arguments."""
        return DuplicateCheckArguments.model_json_schema()

    def as_openai_tool(self) -> dict[str, Any]:
        """Tool definition in the OpenAI function-calling format."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    async def invoke(self, arguments: dict[str, Any] | str) -> str:
        """Run the check and return ``{duplicate, message, similarity_score}`` as JSON.

        *arguments* may be a dict or the raw JSON string a model emits.
        """
        if isinstance(arguments, str):
            args = DuplicateCheckArguments.model_validate_json(arguments)
        else:
            args = DuplicateCheckArguments.model_validate(arguments)

        result = await self._detector.check_duplicate(
            args.resume_summary, threshold=args.threshold
        )
        return json.dumps(
            {
                "duplicate": result.is_duplicate,
                "message": result.message,
                "similarity_score": result.score,
            }
        )
