"""LLM provider adapters.

Three concrete implementations of ILLMProvider (src/interfaces/llm_provider.py):
    - AnthropicLLMProvider -- Claude via the Messages API
    - OpenAILLMProvider    -- gpt-4o-mini (also any OpenAI-compatible API)
    - OllamaLLMProvider    -- local models via an Ollama server

main.py picks the first one with credentials, in that order.  The OpenAI and
Ollama adapters share ``chat_completions.create_chat_completion``.
"""

from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.ollama_provider import OllamaLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OllamaLLMProvider", "OpenAILLMProvider"]
