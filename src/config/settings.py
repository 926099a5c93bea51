"""Application settings loaded from environment variables via pydantic-settings.

Two sources, in priority order:

  1. Environment variables, e.g. ``OPENAI_API_KEY=sk-abc123``
  2. The ``.env`` file in the working directory (local development)

Field ``openai_api_key`` maps to ``OPENAI_API_KEY``; defaults apply when
neither source sets a value.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """resumeVault application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === LLM Providers ===
    # Empty string = "not configured"; provider selection in main.py skips
    # providers with empty keys and falls through to the next.
    openai_api_key: str = ""
    openai_base_url: str = ""  # OpenAI-compatible endpoint (TogetherAI, Groq, ...)
    openai_text_model: str = ""  # Defaults to gpt-4o-mini when empty
    openai_embedding_model: str = ""  # Defaults to text-embedding-3-small when empty
    # Vector size for models missing from the built-in table, or to shorten
    # text-embedding-3 output.  0 = use the model's native size.
    openai_embedding_dimensions: int = Field(default=0, ge=0)
    anthropic_api_key: str = ""
    anthropic_model: str = "claude-sonnet-4-20250514"
    ollama_base_url: str = "http://localhost:11434"
    ollama_text_model: str = "llama3.1"

    # === Record store (ChromaDB) ===
    chromadb_persist_dir: str = "./data/chromadb"
    chromadb_collection: str = "employees"
    # Set chromadb_host to talk to a Chroma server instead of a local directory.
    chromadb_host: str = ""
    chromadb_port: int = 8000

    # === Ingestion ===
    # Orchestrator-level duplicate threshold.  The detector's own default
    # (0.90) only applies to callers that pass no threshold at all.
    duplicate_threshold: float = Field(default=0.98, ge=0.0, le=1.0)
    summary_mode: Literal["llm", "template"] = "llm"
    extraction_temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    summary_temperature: float = Field(default=0.0, ge=0.0, le=2.0)
    max_upload_bytes: int = 10 * 1024 * 1024

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 3000
    app_env: str = "development"
    log_level: str = "INFO"
    # Comma-separated browser origins allowed to call the API; empty = any.
    cors_allowed_origins: str = ""

    def get_cors_origins(self) -> list[str]:
        return [o.strip() for o in self.cors_allowed_origins.split(",") if o.strip()]

    def get_available_llm_providers(self) -> list[str]:
        """Return LLM provider names in selection order, skipping unconfigured ones."""
        providers: list[str] = []
        if self.anthropic_api_key:
            providers.append("anthropic")
        if self.openai_api_key:
            providers.append("openai")
        if self.ollama_base_url:
            providers.append("ollama")
        return providers
