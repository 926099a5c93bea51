"""Ollama LLM provider adapter.

Talks to a local Ollama server through its OpenAI-compatible ``/v1``
endpoint, so résumés never leave the machine.  Smaller local models fill the
employee schema less reliably than hosted ones; expect more
``ExtractionSchemaError`` failures.

Setup: ``ollama pull llama3.1`` and set ``OLLAMA_BASE_URL``.
"""

from __future__ import annotations

import httpx
import openai

from src.config.settings import Settings
from src.interfaces.llm_provider import ILLMProvider
from src.providers.llm.chat_completions import create_chat_completion

_PROBE_TIMEOUT = 5.0


class OllamaLLMProvider(ILLMProvider):
    """LLM provider backed by a local Ollama server."""

    def __init__(self, settings: Settings) -> None:
        self._base_url = settings.ollama_base_url.rstrip("/")
        self._model = settings.ollama_text_model
        # The SDK rejects an empty key; Ollama never reads it.
        self._client = openai.AsyncOpenAI(base_url=f"{self._base_url}/v1", api_key="ollama")

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.3,
        max_tokens: int = 4000,
    ) -> str:
        return await create_chat_completion(
            self._client,
            model=self._model,
            label=self.get_provider_name(),
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def is_available(self) -> bool:
        return bool(self._base_url)

    async def validate_credentials(self) -> bool:
        """Ollama has no credentials; check the server answers ``/api/tags``."""
        if not self._base_url:
            return False
        try:
            async with httpx.AsyncClient(timeout=_PROBE_TIMEOUT) as client:
                response = await client.get(f"{self._base_url}/api/tags")
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    def get_provider_name(self) -> str:
        return "ollama"
