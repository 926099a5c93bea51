"""Pipeline orchestration for résumé ingestion."""

from src.pipeline.orchestrator import ResumeIngestionPipeline, store_session

__all__ = [
    "ResumeIngestionPipeline",
    "store_session",
]
