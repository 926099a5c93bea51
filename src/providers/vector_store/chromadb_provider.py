"""ChromaDB record store adapter.

Implements :class:`IRecordStoreProvider` on top of a ChromaDB collection
using cosine distance.  Each stored employee is one collection entry:

    id         -> StoredRecord.record_id (UUID)
    document   -> the employee summary (the text the similarity search ranks)
    embedding  -> the summary's vector, computed once by the pipeline
    metadata   -> flat name/job fields for filtering, plus the full record
                  serialised as JSON under ``record_json``

Works either against a local directory (``PersistentClient``) or a Chroma
server (``HttpClient``) when a host is configured.  The client is created by
the first :meth:`connect` and dropped when the last session closes, so one
instance can serve concurrent requests.  Nothing is opened at import.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any

# ChromaDB ships PostHog telemetry; a client/library version mismatch
# makes it log "capture() takes 1 positional argument" on every call.
# Disable it before chromadb is imported.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb
import structlog

from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.record_store_provider import IRecordStoreProvider
from src.models.ingestion import SimilarityMatch, StoredRecord
from src.utils.errors import (
    ConfigurationError,
    SimilarityServiceError,
    StoreConnectionError,
)

logger = structlog.get_logger(logger_name=__name__)


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """Embedding function that refuses to run.

    Every vector is computed by our IEmbeddingProvider and passed in
    explicitly.  Without this, ChromaDB downloads its default ONNX model on
    collection creation.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "resumeVault passes pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        return "noop_precomputed"


class ChromaDBRecordStore(IRecordStoreProvider):
    """Employee record store backed by a ChromaDB collection."""

    def __init__(
        self,
        embedding_provider: IEmbeddingProvider,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "employees",
        host: str = "",
        port: int = 8000,
    ) -> None:
        self._embedding_provider = embedding_provider
        self._persist_directory = persist_directory
        self._collection_name = collection_name
        self._host = host
        self._port = port
        self._client: Any = None
        self._collection: Any = None
        self._sessions = 0
        self._session_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        async with self._session_lock:
            if self._collection is None:
                await self._open()
            self._sessions += 1

    async def _open(self) -> None:
        try:
            client = await asyncio.to_thread(self._open_client)
            collection = await asyncio.to_thread(self._open_collection, client)
        except Exception as exc:
            raise StoreConnectionError(
                message=f"ChromaDB connect failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        await asyncio.to_thread(self._validate_embedding_dimensions, collection)
        self._client = client
        self._collection = collection
        logger.info(
            "chromadb_connected",
            collection=self._collection_name,
            mode="http" if self._host else "persistent",
        )

    async def ping(self) -> bool:
        if self._client is None:
            return False
        try:
            await asyncio.to_thread(self._client.heartbeat)
            return True
        except Exception as exc:
            logger.warning("chromadb_ping_failed", error=str(exc))
            return False

    async def close(self) -> None:
        async with self._session_lock:
            if self._sessions == 0:
                return
            self._sessions -= 1
            if self._sessions > 0:
                return
            # Chroma clients hold no socket that needs an explicit shutdown;
            # dropping the references ends the connection.
            self._collection = None
            self._client = None
        logger.info("chromadb_closed", collection=self._collection_name)

    def is_connected(self) -> bool:
        return self._collection is not None

    # ------------------------------------------------------------------
    # Similarity index
    # ------------------------------------------------------------------

    async def query(self, query_text: str, top_k: int = 1) -> list[SimilarityMatch]:
        embedding = await self._embedding_provider.embed_single(query_text)
        return await self.query_by_embedding(embedding, top_k=top_k)

    async def query_by_embedding(
        self, embedding: list[float], top_k: int = 1
    ) -> list[SimilarityMatch]:
        collection = self._require_collection()
        try:
            matches = await asyncio.to_thread(self._query_sync, collection, embedding, top_k)
        except Exception as exc:
            raise SimilarityServiceError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "chromadb_query",
            results_count=len(matches),
            top_score=matches[0].score if matches else 0.0,
        )
        return matches

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def insert_records(self, records: list[StoredRecord]) -> int:
        if not records:
            return 0
        collection = self._require_collection()
        try:
            await asyncio.to_thread(
                collection.add,
                ids=[r.record_id for r in records],
                embeddings=[r.embedding for r in records],
                documents=[r.summary for r in records],
                metadatas=[self._record_to_metadata(r) for r in records],
            )
        except Exception as exc:
            raise SimilarityServiceError(
                message=f"ChromaDB insert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("chromadb_insert_records", count=len(records))
        return len(records)

    async def count(self) -> int:
        collection = self._require_collection()
        try:
            return await asyncio.to_thread(collection.count)
        except Exception as exc:
            raise SimilarityServiceError(
                message=f"ChromaDB count failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def get_provider_name(self) -> str:
        return "chromadb"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _open_client(self) -> Any:
        chroma_settings = chromadb.config.Settings(anonymized_telemetry=False)
        if self._host:
            return chromadb.HttpClient(host=self._host, port=self._port, settings=chroma_settings)
        return chromadb.PersistentClient(path=self._persist_directory, settings=chroma_settings)

    def _open_collection(self, client: Any) -> Any:
        # Collections created by older ChromaDB versions persist the default
        # embedding function; newer versions reject a different one, so
        # fall back to opening without it.
        try:
            return client.get_or_create_collection(
                name=self._collection_name,
                metadata={"hnsw:space": "cosine"},
                embedding_function=_NoopEmbeddingFunction(),
            )
        except ValueError:
            return client.get_or_create_collection(
                name=self._collection_name,
                metadata={"hnsw:space": "cosine"},
            )

    def _validate_embedding_dimensions(self, collection: Any) -> None:
        """Fail fast when stored vectors don't match the embedding provider."""
        if collection.count() == 0:
            return
        sample = collection.peek(limit=1)
        embeddings = sample.get("embeddings") if sample else None
        if embeddings is None or len(embeddings) == 0:
            return

        stored_dim = len(embeddings[0])
        expected_dim = self._embedding_provider.get_dimension()
        if stored_dim != expected_dim:
            logger.error(
                "embedding_dimension_mismatch",
                stored_dim=stored_dim,
                expected_dim=expected_dim,
                provider=self._embedding_provider.get_provider_name(),
            )
            raise ConfigurationError(
                message=(
                    f"Embedding dimension mismatch: collection '{self._collection_name}' "
                    f"holds {stored_dim}-dim vectors but provider "
                    f"'{self._embedding_provider.get_provider_name()}' produces "
                    f"{expected_dim}-dim vectors."
                ),
                provider_name=self.get_provider_name(),
            )

    def _require_collection(self) -> Any:
        if self._collection is None:
            raise StoreConnectionError(
                message="Record store is not connected",
                provider_name=self.get_provider_name(),
            )
        return self._collection

    @staticmethod
    def _query_sync(collection: Any, embedding: list[float], top_k: int) -> list[SimilarityMatch]:
        total = collection.count()
        if total == 0:
            return []

        results = collection.query(
            query_embeddings=[embedding],
            n_results=min(top_k, total),
            include=["documents", "metadatas", "distances"],
        )
        if not results["ids"] or not results["ids"][0]:
            return []

        ids = results["ids"][0]
        documents = results["documents"][0] if results["documents"] else [""] * len(ids)
        metadatas = results["metadatas"][0] if results["metadatas"] else [{}] * len(ids)
        distances = results["distances"][0] if results["distances"] else [1.0] * len(ids)

        matches: list[SimilarityMatch] = []
        for record_id, document, meta, distance in zip(
            ids, documents, metadatas, distances, strict=True
        ):
            # Cosine distance is 1 - cosine similarity.
            similarity = max(0.0, min(1.0, 1.0 - float(distance)))
            matches.append(
                SimilarityMatch(
                    score=similarity,
                    record_id=record_id,
                    employee_id=str((meta or {}).get("employee_id", "")),
                    summary=document or "",
                )
            )
        matches.sort(key=lambda m: m.score, reverse=True)
        return matches

    @staticmethod
    def _record_to_metadata(stored: StoredRecord) -> dict[str, str]:
        """Flatten a stored record into Chroma's scalar-only metadata."""
        record = stored.record
        return {
            "employee_id": record.employee_id,
            "first_name": record.first_name,
            "last_name": record.last_name,
            "job_title": record.job_details.job_title,
            "department": record.job_details.department,
            "skills": ", ".join(record.skills),
            "record_json": record.model_dump_json(),
        }
