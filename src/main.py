"""resumeVault FastAPI application entry point.

Wires together all providers, services, and routes via dependency injection.
Loads configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging.

Also exposes ``build_pipeline`` for CLI or scripting usage outside the web
server.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router as api_router
from src.config.loader import load_config
from src.config.settings import Settings
from src.interfaces.embedding_provider import IEmbeddingProvider
from src.interfaces.llm_provider import ILLMProvider
from src.pipeline.orchestrator import ResumeIngestionPipeline
from src.providers.document.pymupdf_provider import PyMuPDFTextProvider
from src.providers.llm.anthropic_provider import AnthropicLLMProvider
from src.providers.llm.ollama_provider import OllamaLLMProvider
from src.providers.llm.openai_provider import OpenAILLMProvider
from src.providers.vector_store.chromadb_provider import ChromaDBRecordStore
from src.services.duplicate_detector import DuplicateDetector
from src.services.record_extractor import RecordExtractor
from src.services.summary_generator import SummaryGenerator
from src.utils.errors import ConfigurationError
from src.utils.logging import configure_logging, get_logger

_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_llm_provider(app_settings: Settings) -> ILLMProvider:
    """Select the first available LLM provider based on configured API keys.

    Priority order: Anthropic -> OpenAI -> Ollama (always available).
    """
    if app_settings.anthropic_api_key:
        return AnthropicLLMProvider(settings=app_settings)
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings)
    return OllamaLLMProvider(settings=app_settings)


def _build_embedding_provider(app_settings: Settings) -> IEmbeddingProvider:
    """Select the first available embedding provider.

    Priority: OpenAI/OpenAI-compatible (if API key set) ->
              Nomic/Ollama (if reachable).

    Raises
    ------
    ConfigurationError
        If neither provider can be used.  Duplicate detection is not
        optional, so there is no embedding-less fallback.
    """
    if app_settings.openai_api_key:
        from src.providers.embedding.openai_embedding_provider import (
            OpenAIEmbeddingProvider,
        )

        provider: IEmbeddingProvider = OpenAIEmbeddingProvider(settings=app_settings)
        if provider.is_available():
            return provider

    from src.providers.embedding.nomic_embedding_provider import (
        NomicEmbeddingProvider,
    )

    provider = NomicEmbeddingProvider(settings=app_settings)
    if provider.is_available():
        return provider

    raise ConfigurationError(
        message=(
            "No embedding provider available: set OPENAI_API_KEY or run Ollama "
            "with nomic-embed-text"
        ),
    )


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def _build_all(
    app_settings: Settings,
    app_config: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components, stored on ``app.state`` by the
    web server and used directly by the CLI.
    """
    cfg = app_config if app_config is not None else config
    llm_cfg = cfg.get("llm", {})

    llm = _build_llm_provider(app_settings)
    embedding_provider = _build_embedding_provider(app_settings)
    document_provider = PyMuPDFTextProvider()

    record_store = ChromaDBRecordStore(
        embedding_provider=embedding_provider,
        persist_directory=app_settings.chromadb_persist_dir,
        collection_name=app_settings.chromadb_collection,
        host=app_settings.chromadb_host,
        port=app_settings.chromadb_port,
    )

    record_extractor = RecordExtractor(
        llm_provider=llm,
        temperature=app_settings.extraction_temperature,
        max_tokens=llm_cfg.get("extraction_max_tokens", 4000),
    )
    summary_generator = SummaryGenerator(
        llm_provider=llm,
        mode=app_settings.summary_mode,
        temperature=app_settings.summary_temperature,
        max_tokens=llm_cfg.get("summary_max_tokens", 400),
    )
    duplicate_detector = DuplicateDetector(
        embedding_provider=embedding_provider,
        record_store=record_store,
    )

    pipeline = ResumeIngestionPipeline(
        document_provider=document_provider,
        record_extractor=record_extractor,
        summary_generator=summary_generator,
        duplicate_detector=duplicate_detector,
        record_store=record_store,
        duplicate_threshold=app_settings.duplicate_threshold,
    )

    provider_registry: dict[str, str] = {
        "llm": llm.get_provider_name(),
        "embedding": embedding_provider.get_provider_name(),
        "document": document_provider.get_provider_name(),
        "record_store": record_store.get_provider_name(),
        "summary_mode": summary_generator.mode,
    }

    return {
        "pipeline": pipeline,
        "record_store": record_store,
        "duplicate_detector": duplicate_detector,
        "provider_registry": provider_registry,
        "max_upload_bytes": app_settings.max_upload_bytes,
        "primary_llm_name": llm.get_provider_name(),
    }


def build_pipeline(custom_settings: Settings | None = None) -> dict[str, Any]:
    """Construct and return all pipeline services with injected dependencies.

    Parameters
    ----------
    custom_settings:
        Application settings.  Uses module-level ``settings`` if not provided.

    Returns
    -------
    dict
        Component instances keyed by role name, plus ``"settings"``.
    """
    s = custom_settings or settings
    components = _build_all(s)
    components["settings"] = s
    return components


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup."""
    components = _build_all(settings)

    for key, value in components.items():
        setattr(application.state, key, value)

    _logger.info(
        "app_startup",
        version=_VERSION,
        environment=settings.app_env,
        primary_llm=components["primary_llm_name"],
        providers=components["provider_registry"],
    )

    yield

    # Store sessions are scoped per request; close is a no-op when idle.
    await components["record_store"].close()
    _logger.info("app_shutdown")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="resumeVault API",
        version=_VERSION,
        description=(
            "Upload a PDF résumé, extract a structured employee record with an "
            "LLM, and store it unless a near-duplicate employee already exists."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application, allowed_origins=settings.get_cors_origins() or None)

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "src.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
