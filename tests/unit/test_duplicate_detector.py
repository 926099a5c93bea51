"""Unit tests for DuplicateDetector and DuplicateCheckTool."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.record_store_provider import IRecordStoreProvider
from src.models.employee import EmployeeRecord
from src.models.ingestion import DuplicateCheckResult, SimilarityMatch, StoredRecord
from src.services.duplicate_detector import (
    DEFAULT_DUPLICATE_THRESHOLD,
    DuplicateCheckTool,
    DuplicateDetector,
)
from src.utils.errors import SimilarityServiceError
from tests.conftest import MockEmbeddingProvider, MockRecordStore


def _detector_with_score(score: float | None) -> DuplicateDetector:
    """Detector whose store answers with one match at *score* (or nothing)."""
    embedding = MagicMock(spec=IEmbeddingProvider)
    embedding.embed_single = AsyncMock(return_value=[0.1, 0.2, 0.3])
    embedding.get_provider_name.return_value = "mock-embedding"

    store = MagicMock(spec=IRecordStoreProvider)
    matches = [] if score is None else [
        SimilarityMatch(score=score, record_id="r-1", employee_id="E-1", summary="s")
    ]
    store.query_by_embedding = AsyncMock(return_value=matches)
    return DuplicateDetector(embedding_provider=embedding, record_store=store)


# ======================================================================
# DuplicateDetector
# ======================================================================


class TestCheckDuplicate:
    @pytest.mark.asyncio
    async def test_empty_store_scores_zero(self) -> None:
        result = await _detector_with_score(None).check_duplicate("summary", threshold=0.5)
        assert result.score == 0.0
        assert not result.is_duplicate
        assert result.nearest_employee_id is None
        assert result.message == "No similar resume found."

    @pytest.mark.asyncio
    async def test_threshold_is_inclusive(self) -> None:
        result = await _detector_with_score(0.98).check_duplicate("summary", threshold=0.98)
        assert result.is_duplicate
        assert result.nearest_employee_id == "E-1"
        assert result.message == "This resume is very similar to an existing entry."

    @pytest.mark.asyncio
    async def test_below_threshold(self) -> None:
        result = await _detector_with_score(0.97).check_duplicate("summary", threshold=0.98)
        assert not result.is_duplicate
        assert result.score == 0.97

    @pytest.mark.asyncio
    async def test_threshold_zero_flags_everything(self) -> None:
        result = await _detector_with_score(None).check_duplicate("summary", threshold=0.0)
        assert result.is_duplicate

    @pytest.mark.asyncio
    async def test_threshold_one_needs_exact_match(self) -> None:
        assert not (await _detector_with_score(0.999).check_duplicate("s", threshold=1.0)).is_duplicate
        assert (await _detector_with_score(1.0).check_duplicate("s", threshold=1.0)).is_duplicate

    @pytest.mark.asyncio
    async def test_default_threshold(self) -> None:
        result = await _detector_with_score(0.9).check_duplicate("summary")
        assert DEFAULT_DUPLICATE_THRESHOLD == 0.90
        assert result.threshold == 0.90
        assert result.is_duplicate

    @pytest.mark.asyncio
    @pytest.mark.parametrize("threshold", [-0.01, 1.01])
    async def test_out_of_range_threshold(self, threshold: float) -> None:
        with pytest.raises(ValueError):
            await _detector_with_score(0.5).check_duplicate("summary", threshold=threshold)

    @pytest.mark.asyncio
    async def test_returns_embedding_for_reuse(self) -> None:
        result = await _detector_with_score(0.1).check_duplicate("summary", threshold=0.9)
        assert result.embedding == [0.1, 0.2, 0.3]

    @pytest.mark.asyncio
    async def test_embedding_failure_raises_similarity_error(self) -> None:
        detector = _detector_with_score(0.1)
        detector._embedding.embed_single = AsyncMock(side_effect=RuntimeError("socket closed"))
        with pytest.raises(SimilarityServiceError):
            await detector.check_duplicate("summary")

    @pytest.mark.asyncio
    async def test_query_failure_propagates(self) -> None:
        detector = _detector_with_score(0.1)
        detector._store.query_by_embedding = AsyncMock(
            side_effect=SimilarityServiceError(message="index offline")
        )
        with pytest.raises(SimilarityServiceError):
            await detector.check_duplicate("summary")

    @pytest.mark.asyncio
    async def test_identical_summary_against_in_memory_store(
        self, jane_doe_record: EmployeeRecord
    ) -> None:
        embedding = MockEmbeddingProvider()
        store = MockRecordStore(embedding)
        await store.connect()
        vector = await embedding.embed_single("Jane Doe, engineer.")
        await store.insert_records(
            [StoredRecord(record=jane_doe_record, summary="Jane Doe, engineer.", embedding=vector)]
        )
        detector = DuplicateDetector(embedding_provider=embedding, record_store=store)

        same = await detector.check_duplicate("Jane Doe, engineer.", threshold=0.98)
        other = await detector.check_duplicate("John Roe, accountant.", threshold=0.98)

        assert same.is_duplicate
        assert same.score == pytest.approx(1.0)
        assert same.nearest_employee_id == "E-1001"
        assert not other.is_duplicate


# ======================================================================
# DuplicateCheckTool
# ======================================================================


class TestDuplicateCheckTool:
    def _tool(self) -> tuple[DuplicateCheckTool, MagicMock]:
        detector = MagicMock(spec=DuplicateDetector)
        detector.check_duplicate = AsyncMock(
            return_value=DuplicateCheckResult(
                is_duplicate=True,
                score=0.95,
                threshold=0.9,
                message="This resume is very similar to an existing entry.",
                nearest_employee_id="E-1",
            )
        )
        return DuplicateCheckTool(detector), detector

    def test_declared_schema(self) -> None:
        tool, _ = self._tool()
        assert tool.name == "duplicate_resume_check"
        schema = tool.parameters
        assert set(schema["properties"]) == {"resume_summary", "threshold"}
        assert schema["required"] == ["resume_summary"]

        definition = tool.as_openai_tool()
        assert definition["function"]["name"] == "duplicate_resume_check"

    @pytest.mark.asyncio
    async def test_invoke_without_threshold_passes_none(self) -> None:
        tool, detector = self._tool()
        reply = json.loads(await tool.invoke({"resume_summary": "Jane Doe"}))

        detector.check_duplicate.assert_awaited_once_with("Jane Doe", threshold=None)
        assert reply == {
            "duplicate": True,
            "message": "This resume is very similar to an existing entry.",
            "similarity_score": 0.95,
        }

    @pytest.mark.asyncio
    async def test_invoke_passes_threshold_through(self) -> None:
        tool, detector = self._tool()
        await tool.invoke('{"resume_summary": "Jane Doe", "threshold": 0.75}')
        detector.check_duplicate.assert_awaited_once_with("Jane Doe", threshold=0.75)

    @pytest.mark.asyncio
    async def test_invoke_uses_detector_default(self) -> None:
        detector = _detector_with_score(0.91)
        reply = json.loads(await DuplicateCheckTool(detector).invoke({"resume_summary": "x"}))
        assert reply["duplicate"] is True
        assert reply["similarity_score"] == 0.91

    @pytest.mark.asyncio
    async def test_invoke_rejects_bad_arguments(self) -> None:
        tool, _ = self._tool()
        with pytest.raises(ValueError):
            await tool.invoke({"summary": "wrong key"})
