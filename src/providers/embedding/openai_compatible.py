"""Embedding request path shared by the OpenAI and Nomic adapters.

Both reach an ``/embeddings`` endpoint through the ``openai`` client.  The
vectors they return end up in the record store next to vectors written
earlier, so every vector is checked against the size the store expects.
"""

from __future__ import annotations

from typing import Any

import openai
import structlog

from src.utils.errors import SimilarityServiceError

logger = structlog.get_logger(logger_name=__name__)


def normalize_text(text: str) -> str:
    """Collapse whitespace runs (PDF line breaks, indentation) to single spaces."""
    return " ".join(text.split())


async def create_embeddings(
    client: openai.AsyncOpenAI,
    texts: list[str],
    *,
    model: str,
    label: str,
    dimension: int,
    batch_limit: int,
    request_options: dict[str, Any] | None = None,
) -> list[list[float]]:
    """Embed *texts* in batches of at most *batch_limit*.

    Raises
    ------
    SimilarityServiceError
        If a request fails or a vector does not have *dimension* entries.
    """
    vectors: list[list[float]] = []
    for start in range(0, len(texts), batch_limit):
        batch = texts[start : start + batch_limit]
        try:
            response = await client.embeddings.create(
                input=batch, model=model, **(request_options or {})
            )
        except openai.APIError as exc:
            raise SimilarityServiceError(
                message=f"{label} embedding API error: {exc}",
                provider_name=label,
            ) from exc

        for item in response.data:
            if len(item.embedding) != dimension:
                raise SimilarityServiceError(
                    message=(
                        f"{label} returned a {len(item.embedding)}-dimensional vector "
                        f"for model {model}, expected {dimension}"
                    ),
                    provider_name=label,
                )
            vectors.append(item.embedding)

        logger.debug(
            "embedding_batch",
            provider=label,
            model=model,
            batch_size=len(batch),
            tokens=response.usage.total_tokens if response.usage else None,
        )
    return vectors
