"""Embedding provider implementations.

Embeddings turn an employee summary into a vector; the record store ranks
stored summaries by cosine similarity to it.

Two implementations of IEmbeddingProvider, in selection order:
    1. OpenAIEmbeddingProvider -- text-embedding-3-small (1536 dims), needs a key.
    2. NomicEmbeddingProvider  -- nomic-embed-text via Ollama (768 dims), local.

Switching provider changes the vector dimension; an existing collection
built with the other provider will be rejected by the record store.
"""

from src.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider
from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = ["NomicEmbeddingProvider", "OpenAIEmbeddingProvider"]
