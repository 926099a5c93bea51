"""resumeVault API layer: routes, schemas, and middleware."""

from src.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from src.api.routes import router
from src.api.schemas import (
    DuplicateCheckRequest,
    DuplicateCheckResponse,
    ErrorResponse,
    HealthResponse,
    ResumeUploadResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "DuplicateCheckRequest",
    "DuplicateCheckResponse",
    "ErrorResponse",
    "HealthResponse",
    "ResumeUploadResponse",
]
