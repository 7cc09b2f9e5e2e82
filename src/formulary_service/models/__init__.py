"""Data models for the formulary service."""

from formulary_service.models.schema import (
    ClassListResponse,
    ComplianceCheckRequest,
    PriorAuthSubmission,
)
from formulary_service.models.formulary import (
    BulkImportResult,
    ComplianceResult,
    Drug,
    FilterCriteria,
    FormularyStats,
    PriorAuthCriteria,
    PriorAuthRequest,
    PriorAuthStatus,
    QuantityLimit,
    StepTherapyRule,
)

__all__ = [
    "ClassListResponse",
    "ComplianceCheckRequest",
    "PriorAuthSubmission",
    "BulkImportResult",
    "ComplianceResult",
    "Drug",
    "FilterCriteria",
    "FormularyStats",
    "PriorAuthCriteria",
    "PriorAuthRequest",
    "PriorAuthStatus",
    "QuantityLimit",
    "StepTherapyRule",
]
