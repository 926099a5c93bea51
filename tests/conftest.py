"""Shared pytest fixtures for the resumeVault test suite."""

from __future__ import annotations

import asyncio
import hashlib
import json
import math
from collections.abc import Callable
from pathlib import Path
from typing import Any

import fitz
import pytest

from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.llm_provider import ILLMProvider
from src.interfaces.record_store_provider import IRecordStoreProvider
from src.models.employee import EmployeeRecord
from src.models.ingestion import SimilarityMatch, StoredRecord
from src.utils.errors import LLMError, StoreConnectionError

# ---------------------------------------------------------------------------
# Sample data
# ---------------------------------------------------------------------------

JANE_DOE_RESUME_LINES = [
    "Jane Doe",
    "Senior Software Engineer",
    "jane.doe@example.com | +1 555 0100",
    "San Francisco, CA, USA",
    "Skills: Python, Kubernetes, PostgreSQL",
    "Experience: Platform team lead at Example Corp since 2019.",
]

JANE_DOE_RECORD: dict[str, Any] = {
    "employee_id": "E-1001",
    "first_name": "Jane",
    "last_name": "Doe",
    "date_of_birth": "",
    "address": {
        "street": "",
        "city": "San Francisco",
        "state": "CA",
        "postal_code": "",
        "country": "USA",
    },
    "contact_details": {"email": "jane.doe@example.com", "phone_number": "+1 555 0100"},
    "job_details": {
        "job_title": "Senior Software Engineer",
        "department": "Platform",
        "hire_date": "2019-03-01",
        "employment_type": "Full-Time",
        "salary": None,
        "currency": "",
    },
    "work_location": {"nearest_office": "San Francisco", "is_remote": False},
    "reporting_manager": "",
    "skills": ["Python", "Kubernetes", "PostgreSQL"],
    "performance_reviews": [],
    "benefits": {"health_insurance": "", "retirement_plan": "", "paid_time_off": None},
    "emergency_contact": {"name": "", "relationship": "", "phone_number": ""},
    "notes": "",
}


def record_reply(*records: dict[str, Any]) -> str:
    """Model reply carrying *records* as a fenced JSON array."""
    return "```json\n" + json.dumps(list(records)) + "\n```"


def make_pdf(lines: list[str] | None = None) -> bytes:
    """Build a one-page PDF in memory; ``None`` or ``[]`` gives a blank page."""
    doc = fitz.open()
    page = doc.new_page()
    if lines:
        page.insert_text((72, 72), "\n".join(lines), fontsize=11)
    data = doc.tobytes()
    doc.close()
    return data


# ---------------------------------------------------------------------------
# Embedding
# ---------------------------------------------------------------------------

_EMBEDDING_DIM = 64


def _hash_to_vector(text: str, dim: int = _EMBEDDING_DIM) -> list[float]:
    """Deterministic unit vector derived from the SHA-256 of *text*.

    Same text, same vector; different texts land far apart.
    """
    raw = hashlib.sha256(text.encode("utf-8")).digest()
    while len(raw) < dim:
        raw += hashlib.sha256(raw).digest()
    values = [(b - 127.5) / 127.5 for b in raw[:dim]]
    magnitude = max(math.sqrt(sum(v * v for v in values)), 1e-10)
    return [v / magnitude for v in values]


class MockEmbeddingProvider(IEmbeddingProvider):
    """In-memory deterministic embedding provider that counts its calls."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.extend(texts)
        return [_hash_to_vector(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        self.calls.append(text)
        return _hash_to_vector(text)

    def get_dimension(self) -> int:
        return _EMBEDDING_DIM

    def get_provider_name(self) -> str:
        return "mock-embedding"

    def is_available(self) -> bool:
        return True


# ---------------------------------------------------------------------------
# Record store
# ---------------------------------------------------------------------------


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class MockRecordStore(IRecordStoreProvider):
    """In-memory record store that counts open sessions.

    ``fail_connect`` makes :meth:`connect` raise, ``ping_ok=False`` makes
    the liveness check fail, ``fail_insert`` makes writes raise.
    :attr:`peak_sessions` records the most sessions open at once.
    """

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider | None = None,
        *,
        fail_connect: bool = False,
        ping_ok: bool = True,
        fail_insert: bool = False,
    ) -> None:
        self.records: list[StoredRecord] = []
        self.connect_calls = 0
        self.close_calls = 0
        self.peak_sessions = 0
        self._sessions = 0
        self._embedding = embedding_provider or MockEmbeddingProvider()
        self._fail_connect = fail_connect
        self._ping_ok = ping_ok
        self._fail_insert = fail_insert

    async def connect(self) -> None:
        self.connect_calls += 1
        # Yield like a real network round trip so concurrent sessions interleave.
        await asyncio.sleep(0)
        if self._fail_connect:
            raise StoreConnectionError(message="connection refused", provider_name="mock-store")
        self._sessions += 1
        self.peak_sessions = max(self.peak_sessions, self._sessions)

    async def ping(self) -> bool:
        return self.is_connected() and self._ping_ok

    async def close(self) -> None:
        self.close_calls += 1
        self._sessions = max(0, self._sessions - 1)

    def is_connected(self) -> bool:
        return self._sessions > 0

    async def query(self, query_text: str, top_k: int = 1) -> list[SimilarityMatch]:
        return await self.query_by_embedding(await self._embedding.embed_single(query_text), top_k)

    async def query_by_embedding(
        self, embedding: list[float], top_k: int = 1
    ) -> list[SimilarityMatch]:
        self._require_connection()
        scored = [
            SimilarityMatch(
                score=max(0.0, min(1.0, _cosine(embedding, r.embedding))),
                record_id=r.record_id,
                employee_id=r.record.employee_id,
                summary=r.summary,
            )
            for r in self.records
        ]
        scored.sort(key=lambda m: m.score, reverse=True)
        return scored[:top_k]

    async def insert_records(self, records: list[StoredRecord]) -> int:
        self._require_connection()
        if self._fail_insert:
            raise StoreConnectionError(message="write failed", provider_name="mock-store")
        self.records.extend(records)
        return len(records)

    async def count(self) -> int:
        self._require_connection()
        return len(self.records)

    def get_provider_name(self) -> str:
        return "mock-store"

    def _require_connection(self) -> None:
        if not self.is_connected():
            raise StoreConnectionError(message="not connected", provider_name="mock-store")


# ---------------------------------------------------------------------------
# LLM
# ---------------------------------------------------------------------------


class ScriptedLLMProvider(ILLMProvider):
    """LLM stub answering from a script.

    *responder* receives ``(system_prompt, user_prompt)`` and returns the
    reply text, or raises.  Every call is recorded in :attr:`calls`.
    """

    def __init__(self, responder: Callable[[str, str], str]) -> None:
        self._responder = responder
        self.calls: list[dict[str, Any]] = []

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        return self._responder(system_prompt, user_prompt)

    def get_provider_name(self) -> str:
        return "scripted-llm"

    def is_available(self) -> bool:
        return True

    async def validate_credentials(self) -> bool:
        return True


def extraction_responder(system_prompt: str, user_prompt: str) -> str:
    return record_reply(JANE_DOE_RECORD)


def failing_responder(system_prompt: str, user_prompt: str) -> str:
    raise LLMError(message="upstream timeout", provider_name="scripted-llm")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def jane_doe_record() -> EmployeeRecord:
    return EmployeeRecord.model_validate(JANE_DOE_RECORD)


@pytest.fixture
def jane_doe_pdf() -> bytes:
    return make_pdf(JANE_DOE_RESUME_LINES)


@pytest.fixture
def blank_pdf() -> bytes:
    return make_pdf()


@pytest.fixture
def mock_embedding_provider() -> MockEmbeddingProvider:
    return MockEmbeddingProvider()


@pytest.fixture
def mock_record_store(mock_embedding_provider: MockEmbeddingProvider) -> MockRecordStore:
    return MockRecordStore(mock_embedding_provider)


@pytest.fixture
def extraction_llm() -> ScriptedLLMProvider:
    """LLM that always extracts the Jane Doe record."""
    return ScriptedLLMProvider(extraction_responder)
