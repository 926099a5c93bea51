"""OpenAI-compatible embedding provider adapter.

Default model is ``text-embedding-3-small`` (1536 dimensions).  Other models
on OpenAI-compatible hosts work through ``openai_base_url`` and
``openai_embedding_model``; models missing from ``_MODEL_DIMENSIONS`` need
``openai_embedding_dimensions`` so the record store knows the vector size.
"""

from __future__ import annotations

from typing import Any

import openai

from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.providers.embedding.openai_compatible import create_embeddings, normalize_text

_DEFAULT_MODEL = "text-embedding-3-small"
_BATCH_LIMIT = 2048
_FALLBACK_DIMENSION = 768

_MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
    "BAAI/bge-base-en-v1.5": 768,
    "BAAI/bge-large-en-v1.5": 1024,
}


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Embeds employee summaries through an OpenAI-compatible ``/embeddings`` API."""

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key
        self._model = settings.openai_embedding_model or _DEFAULT_MODEL
        self._name = (
            "openai-compatible_embedding" if settings.openai_base_url else "openai_embedding"
        )
        self._client = openai.AsyncOpenAI(
            api_key=self._api_key,
            base_url=settings.openai_base_url or None,
        )

        override = settings.openai_embedding_dimensions
        self._dimension = override or _MODEL_DIMENSIONS.get(self._model, _FALLBACK_DIMENSION)
        # Only the text-embedding-3 family can be asked for shorter vectors.
        self._request_options: dict[str, Any] = {}
        if override and self._model.startswith("text-embedding-3"):
            self._request_options["dimensions"] = override

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        return await create_embeddings(
            self._client,
            [normalize_text(t) for t in texts],
            model=self._model,
            label=self._name,
            dimension=self._dimension,
            batch_limit=_BATCH_LIMIT,
            request_options=self._request_options,
        )

    async def embed_single(self, text: str) -> list[float]:
        (vector,) = await self.embed([text])
        return vector

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return self._name

    def is_available(self) -> bool:
        """Return ``True`` when an API key is set."""
        return bool(self._api_key)
