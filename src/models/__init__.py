"""resumeVault domain models: re-exports all public model classes.

Two submodules:
    - employee.py:  the structured employee record extracted from a résumé
    - ingestion.py: pipeline stages, similarity results, stored records and
                    the tagged ingestion result
"""

from __future__ import annotations

from src.models.employee import (
    EMPLOYEE_FIELDS,
    Address,
    Benefits,
    ContactDetails,
    EmergencyContact,
    EmployeeRecord,
    JobDetails,
    PerformanceReview,
    WorkLocation,
)
from src.models.ingestion import (
    DocumentText,
    DuplicateCheckResult,
    DuplicateResult,
    IngestionResult,
    IngestionStage,
    SimilarityMatch,
    StoredRecord,
    StoredResult,
)

__all__ = [
    "EMPLOYEE_FIELDS",
    "Address",
    "Benefits",
    "ContactDetails",
    "DocumentText",
    "DuplicateCheckResult",
    "DuplicateResult",
    "EmergencyContact",
    "EmployeeRecord",
    "IngestionResult",
    "IngestionStage",
    "JobDetails",
    "PerformanceReview",
    "SimilarityMatch",
    "StoredRecord",
    "StoredResult",
    "WorkLocation",
]
