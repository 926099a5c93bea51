"""Custom exception hierarchy for resumeVault.

All application exceptions inherit from :class:`ResumeVaultError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "pymupdf", "chromadb") caused the failure.

The hierarchy follows the ingestion pipeline's stages:

    ResumeVaultError  (base -- catch-all for any resumeVault error)
    +-- ExtractionTextError      (PDF has no extractable text / unreadable)
    +-- ExtractionSchemaError    (LLM reply does not match the employee schema)
    +-- SummaryError             (summary generation failed)
    +-- SimilarityServiceError   (embedding, index query or index write failed)
    +-- StoreConnectionError     (record store unreachable)
    +-- LLMError                 (any LLM API call failure)
    +-- ConfigurationError       (startup / missing config)
    +-- IngestionError           (the single error ``ingest`` raises: stage + cause)

Nothing in the pipeline retries.  :class:`IngestionError` wraps whichever
of the above ended the run and records the stage it was entering, so the
caller can tell a bad document from a flaky upstream service.
"""

from __future__ import annotations


class ResumeVaultError(Exception):
    """Base exception for all resumeVault errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets for log
    output, e.g. ``[openai] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Input errors: the submitted document is the problem
# ---------------------------------------------------------------------------

class ExtractionTextError(ResumeVaultError):
    """Raised when a document yields no usable text (empty, scanned, corrupt)."""

    def __init__(
        self,
        message: str = "Document has no extractable text",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ExtractionSchemaError(ResumeVaultError):
    """Raised when the LLM reply cannot be parsed into employee records."""

    def __init__(
        self,
        message: str = "Model reply does not match the employee schema",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Service errors: an upstream collaborator failed
# ---------------------------------------------------------------------------

class SummaryError(ResumeVaultError):
    """Raised when a record summary cannot be generated."""

    def __init__(
        self,
        message: str = "Summary generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class SimilarityServiceError(ResumeVaultError):
    """Raised when embedding generation or a vector index operation fails."""

    def __init__(
        self,
        message: str = "Similarity service operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StoreConnectionError(ResumeVaultError):
    """Raised when the record store cannot be reached or fails its ping."""

    def __init__(
        self,
        message: str = "Record store is unreachable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(ResumeVaultError):
    """Raised when an LLM API call fails or returns an empty response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(ResumeVaultError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------

_INPUT_ERRORS = (ExtractionTextError, ExtractionSchemaError)


class IngestionError(ResumeVaultError):
    """Raised by the ingestion pipeline when any stage fails.

    ``stage`` is the :class:`~src.models.ingestion.IngestionStage` value the
    pipeline was trying to enter; ``cause`` is the exception that stopped it
    (also chained as ``__cause__``).
    """

    def __init__(self, stage: str, cause: BaseException) -> None:
        self._stage = stage
        self._cause = cause
        provider = cause.provider_name if isinstance(cause, ResumeVaultError) else None
        super().__init__(
            message=f"Ingestion failed at stage {stage}: {cause}",
            provider_name=provider,
        )

    @property
    def stage(self) -> str:
        return self._stage

    @property
    def cause(self) -> BaseException:
        return self._cause

    @property
    def is_input_error(self) -> bool:
        """``True`` when the submitted document, not a service, is at fault."""
        return isinstance(self._cause, _INPUT_ERRORS)
