"""Unit tests for embedding provider adapters: OpenAI, Nomic."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import openai
import pytest

from src.config.settings import Settings
from src.utils.errors import SimilarityServiceError


def _settings(**overrides) -> Settings:
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_embedding_model": "",
        "ollama_base_url": "http://localhost:11434",
    }
    defaults.update(overrides)
    return Settings(**defaults)


def _embedding_response(*vectors: list[float]) -> MagicMock:
    response = MagicMock()
    response.data = [MagicMock(embedding=v) for v in vectors]
    response.usage = MagicMock(total_tokens=50)
    return response


# ======================================================================
# OpenAI Embedding Provider
# ======================================================================


class TestOpenAIEmbeddingProvider:
    @pytest.fixture()
    def settings(self) -> Settings:
        return _settings()

    def test_get_provider_name(self, settings: Settings) -> None:
        from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        assert OpenAIEmbeddingProvider(settings).get_provider_name() == "openai_embedding"

    def test_is_available_without_key(self) -> None:
        from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        assert OpenAIEmbeddingProvider(_settings(openai_api_key="")).is_available() is False

    def test_default_model_dimension(self, settings: Settings) -> None:
        from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        assert OpenAIEmbeddingProvider(settings).get_dimension() == 1536

    def test_large_model_dimension(self) -> None:
        from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(_settings(openai_embedding_model="text-embedding-3-large"))
        assert provider.get_dimension() == 3072

    @pytest.mark.asyncio
    async def test_embed_success(self, settings: Settings) -> None:
        from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            return_value=_embedding_response([0.1] * 1536, [0.2] * 1536)
        )

        with patch(
            "src.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(settings)
            result = await provider.embed(["hello", "world"])

        assert len(result) == 2
        assert result[1][0] == 0.2
        assert mock_client.embeddings.create.call_args.kwargs["model"] == "text-embedding-3-small"

    @pytest.mark.asyncio
    async def test_embed_empty_list_skips_api(self, settings: Settings) -> None:
        from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        mock_client = AsyncMock()
        with patch(
            "src.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(settings)
            assert await provider.embed([]) == []
        mock_client.embeddings.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_embed_single(self, settings: Settings) -> None:
        from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_embedding_response([0.5] * 1536))

        with patch(
            "src.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(settings)
            result = await provider.embed_single("hello")

        assert result == [0.5] * 1536

    @pytest.mark.asyncio
    async def test_embed_error(self, settings: Settings) -> None:
        from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            side_effect=openai.APIError(message="quota exceeded", request=MagicMock(), body=None)
        )

        with patch(
            "src.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(settings)
            with pytest.raises(SimilarityServiceError, match="quota exceeded"):
                await provider.embed(["hello"])

    @pytest.mark.asyncio
    async def test_whitespace_collapsed_before_embedding(self, settings: Settings) -> None:
        from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_embedding_response([0.1] * 1536))

        with patch(
            "src.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(settings)
            await provider.embed_single("Jane Doe,\n  Senior   Engineer\n")

        assert mock_client.embeddings.create.call_args.kwargs["input"] == ["Jane Doe, Senior Engineer"]

    @pytest.mark.asyncio
    async def test_wrong_vector_size_rejected(self, settings: Settings) -> None:
        from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_embedding_response([0.1] * 8))

        with patch(
            "src.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(settings)
            with pytest.raises(SimilarityServiceError, match="expected 1536"):
                await provider.embed(["hello"])

    @pytest.mark.asyncio
    async def test_dimensions_override_sent_for_v3_models(self) -> None:
        from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_embedding_response([0.1] * 256))

        with patch(
            "src.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(_settings(openai_embedding_dimensions=256))
            await provider.embed(["hello"])

        assert provider.get_dimension() == 256
        assert mock_client.embeddings.create.call_args.kwargs["dimensions"] == 256

    def test_dimensions_override_for_unknown_model(self) -> None:
        from src.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

        provider = OpenAIEmbeddingProvider(
            _settings(openai_embedding_model="acme-embed", openai_embedding_dimensions=384)
        )
        assert provider.get_dimension() == 384


# ======================================================================
# Nomic Embedding Provider
# ======================================================================


class TestNomicEmbeddingProvider:
    @pytest.fixture()
    def settings(self) -> Settings:
        return _settings()

    def test_get_provider_name(self, settings: Settings) -> None:
        from src.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider

        assert NomicEmbeddingProvider(settings).get_provider_name() == "nomic_embedding"

    def test_get_dimension(self, settings: Settings) -> None:
        from src.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider

        assert NomicEmbeddingProvider(settings).get_dimension() == 768

    def test_is_available_success(self, settings: Settings) -> None:
        from src.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider

        with patch(
            "src.providers.embedding.nomic_embedding_provider.httpx.get",
            return_value=MagicMock(status_code=200),
        ):
            assert NomicEmbeddingProvider(settings).is_available() is True

    def test_is_available_failure(self, settings: Settings) -> None:
        import httpx

        from src.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider

        with patch(
            "src.providers.embedding.nomic_embedding_provider.httpx.get",
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            assert NomicEmbeddingProvider(settings).is_available() is False

    @pytest.mark.asyncio
    async def test_embed_success(self, settings: Settings) -> None:
        from src.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider

        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_embedding_response([0.3] * 768))

        with patch(
            "src.providers.embedding.nomic_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ) as ctor:
            provider = NomicEmbeddingProvider(settings)
            result = await provider.embed_single("hello")

        assert len(result) == 768
        assert ctor.call_args.kwargs["base_url"] == "http://localhost:11434/v1"
        kwargs = mock_client.embeddings.create.call_args.kwargs
        assert kwargs["model"] == "nomic-embed-text"
        assert kwargs["input"] == ["clustering: hello"]
