"""OpenAI-compatible LLM provider adapter.

When ``openai_base_url`` is set (TogetherAI, Groq, Fireworks, ...) the client
talks to that host instead of api.openai.com and the provider reports itself
as ``openai-compatible``.
"""

from __future__ import annotations

import openai

from src.config.settings import Settings
from src.interfaces.llm_provider import ILLMProvider
from src.providers.llm.chat_completions import create_chat_completion

_DEFAULT_MODEL = "gpt-4o-mini"

# Seconds.  Uploads are processed inside the request, so a hung model call
# must fail before the HTTP client gives up on us.
_READ_TIMEOUT = 25.0
_CONNECT_TIMEOUT = 5.0


class OpenAILLMProvider(ILLMProvider):
    """Chat-completions provider for OpenAI and OpenAI-compatible hosts.

    ``gpt-4o-mini`` is the default; ``openai_text_model`` overrides it.
    """

    def __init__(self, settings: Settings) -> None:
        self._api_key = settings.openai_api_key
        self._model = settings.openai_text_model or _DEFAULT_MODEL
        self._name = "openai-compatible" if settings.openai_base_url else "openai"
        self._client = openai.AsyncOpenAI(
            api_key=self._api_key,
            base_url=settings.openai_base_url or None,
            timeout=openai.Timeout(_READ_TIMEOUT, connect=_CONNECT_TIMEOUT),
        )

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
            label=self._name,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def is_available(self) -> bool:
        """Return ``True`` when an API key is set.  The key is not checked."""
        return bool(self._api_key)

    async def validate_credentials(self) -> bool:
        """List models: accepted keys succeed without spending tokens."""
        if not self._api_key:
            return False
        try:
            await self._client.models.list()
        except openai.APIError:
            return False
        return True

    def get_provider_name(self) -> str:
        return self._name
