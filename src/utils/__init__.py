"""Utility modules for resumeVault.

- **errors** -- Exception hierarchy rooted at ResumeVaultError; each pipeline
  stage raises its own subclass and the orchestrator wraps them in
  IngestionError with the failing stage.
- **logging** -- structlog setup (console in development, JSON in
  production) plus the per-ingestion context binding.
"""

from src.utils.errors import (
    ConfigurationError,
    ExtractionSchemaError,
    ExtractionTextError,
    IngestionError,
    LLMError,
    ResumeVaultError,
    SimilarityServiceError,
    StoreConnectionError,
    SummaryError,
)
from src.utils.logging import bind_ingestion_context, configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "ExtractionSchemaError",
    "ExtractionTextError",
    "IngestionError",
    "LLMError",
    "ResumeVaultError",
    "SimilarityServiceError",
    "StoreConnectionError",
    "SummaryError",
    "bind_ingestion_context",
    "configure_logging",
    "get_logger",
]
