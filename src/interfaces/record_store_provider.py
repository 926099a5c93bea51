"""Abstract base class for the employee record store.

The record store is both the persistent home of :class:`StoredRecord` rows
and the similarity index over their summaries.  Implementations may wrap
ChromaDB (local or client/server), MongoDB Atlas Vector Search, Qdrant, or
any other vector database.

Connection lifecycle is explicit: the ingestion pipeline opens one store
session per ``ingest`` call (``connect`` + ``ping``), and every successful
``connect`` is paired with one ``close``.  One store instance serves many
concurrent sessions, so implementations count open sessions and release
the underlying connection only when the last one closes.  No implementation
may rely on a connection created at import time.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.ingestion import SimilarityMatch, StoredRecord


# Concrete implementation: ChromaDBRecordStore (src/providers/vector_store/)
class IRecordStoreProvider(ABC):
    """Contract for the write-once employee record store.

    Records are inserted, never updated or deleted, by the pipeline.  Query
    methods are read-only and return at most ``top_k`` matches ordered by
    descending similarity score; an empty store yields an empty list, never
    an error.
    """

    # ------------------------------------------------------------------
    # Connection lifecycle
    # ------------------------------------------------------------------

    @abstractmethod
    async def connect(self) -> None:
        """Open a session, creating the connection if none is open.

        Raises
        ------
        src.utils.errors.StoreConnectionError
            If the store cannot be reached.
        """

    @abstractmethod
    async def ping(self) -> bool:
        """Return ``True`` if the open connection answers a liveness check."""

    @abstractmethod
    async def close(self) -> None:
        """End one session; the connection is dropped with the last one.

        Safe to call when no session is open.
        """

    @abstractmethod
    def is_connected(self) -> bool:
        """Return ``True`` while at least one session is open."""

    # ------------------------------------------------------------------
    # Similarity index
    # ------------------------------------------------------------------

    @abstractmethod
    async def query(self, query_text: str, top_k: int = 1) -> list[SimilarityMatch]:
        """Embed *query_text* and return its nearest stored summaries.

        Raises
        ------
        src.utils.errors.SimilarityServiceError
            If embedding or the index query fails.
        """

    @abstractmethod
    async def query_by_embedding(
        self, embedding: list[float], top_k: int = 1
    ) -> list[SimilarityMatch]:
        """Return the nearest stored summaries to a pre-computed vector.

        Raises
        ------
        src.utils.errors.SimilarityServiceError
            If the index query fails.
        """

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    @abstractmethod
    async def insert_records(self, records: list[StoredRecord]) -> int:
        """Insert records with their summaries and pre-computed embeddings.

        Returns the number of records written.

        Raises
        ------
        src.utils.errors.SimilarityServiceError
            If the write fails.
        """

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored records."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"chromadb"``."""
