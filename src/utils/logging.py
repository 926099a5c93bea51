"""Structured logging setup using structlog.

One shared processor chain (context vars, log level, stack info, exception
info, timestamps) feeds either a coloured ConsoleRenderer for local work or a
JSONRenderer for production.  ``APP_ENV=production`` selects JSON unless the
caller forces it with ``json_output``.

Standard-library ``logging`` is routed through the same formatter so that
httpx, chromadb and uvicorn log lines look like ours.

Ingestion runs bind an ``ingestion_id`` into structlog's context vars via
:func:`bind_ingestion_context`, so every event emitted while one résumé is
being processed (extractor, detector, store) carries the same id.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

_SHARED_PROCESSORS: list[structlog.types.Processor] = [
    structlog.contextvars.merge_contextvars,
    structlog.processors.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.dev.set_exc_info,
    structlog.processors.TimeStamper(fmt="iso"),
]


def _select_renderer(json_output: bool) -> structlog.types.Processor:
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"
    if use_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=True)


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and bridge stdlib logging into it.

    Args:
        log_level: Logging level string (DEBUG, INFO, WARNING, ERROR).
        json_output: Force JSON output regardless of ``APP_ENV``.

    Returns:
        A configured structlog BoundLogger.
    """
    renderer = _select_renderer(json_output)
    level = logging.getLevelName(log_level.upper())

    structlog.configure(
        processors=[*_SHARED_PROCESSORS, renderer],
        # Drops events below the level before any processor runs.
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            *_SHARED_PROCESSORS,
            renderer,
        ],
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level.upper())

    # chromadb is chatty at INFO (telemetry, migrations).
    logging.getLogger("chromadb").setLevel(logging.WARNING)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a structlog logger bound with *name*, configuring defaults if needed."""
    if not structlog.is_configured():
        configure_logging()
    return structlog.get_logger(logger_name=name)


@contextmanager
def bind_ingestion_context(ingestion_id: str) -> Iterator[None]:
    """Bind ``ingestion_id`` to every log event inside the ``with`` block."""
    tokens = structlog.contextvars.bind_contextvars(ingestion_id=ingestion_id)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)
