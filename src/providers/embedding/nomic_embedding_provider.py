"""Nomic embedding provider adapter (local, via Ollama).

``nomic-embed-text`` produces 768-dimensional vectors and expects a task
prefix on every input.  Duplicate detection compares summaries with
summaries, so both the stored and the query side use ``clustering:``.
"""

from __future__ import annotations

import httpx
import openai

from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.providers.embedding.openai_compatible import create_embeddings, normalize_text

_MODEL = "nomic-embed-text"
_DIMENSION = 768
_TASK_PREFIX = "clustering: "
_BATCH_LIMIT = 512
_PROBE_TIMEOUT = 3.0


class NomicEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by ``nomic-embed-text`` served by Ollama."""

    def __init__(self, settings: Settings) -> None:
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._client = openai.AsyncOpenAI(base_url=f"{self._base_url}/v1", api_key="ollama")

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        return await create_embeddings(
            self._client,
            [_TASK_PREFIX + normalize_text(t) for t in texts],
            model=_MODEL,
            label=self.get_provider_name(),
            dimension=_DIMENSION,
            batch_limit=_BATCH_LIMIT,
        )

    async def embed_single(self, text: str) -> list[float]:
        (vector,) = await self.embed([text])
        return vector

    def get_dimension(self) -> int:
        return _DIMENSION

    def get_provider_name(self) -> str:
        return "nomic_embedding"

    def is_available(self) -> bool:
        """Return ``True`` if the Ollama server answers on ``/api/tags``.

        Unlike the other providers this contacts the server, since Ollama
        needs no key and the URL alone says nothing.
        """
        if not self._base_url:
            return False
        try:
            response = httpx.get(f"{self._base_url}/api/tags", timeout=_PROBE_TIMEOUT)
        except httpx.HTTPError:
            return False
        return response.status_code == 200
