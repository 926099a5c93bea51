"""Request path shared by adapters that speak the chat-completions protocol.

OpenAI, OpenAI-compatible hosts and Ollama's ``/v1`` endpoint accept the
same request; only the client, the model and the label in logs differ.
"""

from __future__ import annotations

import openai
import structlog

from src.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)


async def create_chat_completion(
    client: openai.AsyncOpenAI,
    *,
    model: str,
    label: str,
    system_prompt: str,
    user_prompt: str,
    temperature: float,
    max_tokens: int,
) -> str:
    """Send one system + user exchange and return the reply text.

    A reply cut off at *max_tokens* is still returned, but logged as
    ``chat_completion_truncated``: a truncated JSON array is the usual
    reason record extraction fails schema validation.

    Raises
    ------
    LLMError
        If the request fails, times out, or the reply has no text.
    """
    try:
        response = await client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
    except openai.APITimeoutError as exc:
        raise LLMError(message=f"{label} request timed out", provider_name=label) from exc
    except openai.APIError as exc:
        raise LLMError(message=f"{label} API error: {exc}", provider_name=label) from exc

    if not response.choices:
        raise LLMError(message=f"{label} returned empty response", provider_name=label)

    choice = response.choices[0]
    content = choice.message.content
    if not content:
        raise LLMError(message=f"{label} returned empty response", provider_name=label)

    if choice.finish_reason == "length":
        logger.warning(
            "chat_completion_truncated",
            provider=label,
            model=model,
            max_tokens=max_tokens,
        )
    logger.info(
        "chat_completion",
        provider=label,
        model=model,
        tokens=response.usage.total_tokens if response.usage else None,
    )
    return content
