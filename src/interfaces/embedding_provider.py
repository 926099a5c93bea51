"""Abstract base class for text-embedding service providers.

Defines the contract for turning employee summaries into vectors.
Implementations wrap OpenAI ``text-embedding-3-small`` or Nomic
``nomic-embed-text`` served locally by Ollama.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   OpenAIEmbeddingProvider -- text-embedding-3-small (requires API key)
#   NomicEmbeddingProvider  -- nomic-embed-text via Ollama (local)
# Located in: src/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services.

    The same provider must be used for the duplicate-check query vector and
    for the vector written alongside a stored record, otherwise similarity
    scores between old and new records are meaningless.
    """

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Returns vectors positionally aligned with *texts*, each of length
        :meth:`get_dimension`.

        Raises
        ------
        src.utils.errors.SimilarityServiceError
            If the embedding API call fails.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string."""

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the embedding vectors.

        Must match the vectors already stored in the record store.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this embedding provider."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider is configured and reachable."""
