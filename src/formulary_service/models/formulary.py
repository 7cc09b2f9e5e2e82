"""Formulary record, rule, workflow and result schemas."""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class QuantityLimit(BaseModel):
    """Maximum dispensable quantity over a period."""

    quantity: int = Field(ge=0, description="Max quantity")
    days: int = Field(ge=1, description="Per number of days")


class Drug(BaseModel):
    """A formulary entry keyed by its National Drug Code.

    Only field types are checked. Missing business fields such as ``tier`` are
    accepted as-is; a drug without a tier simply joins no tier set.
    """

    ndc: str = Field(min_length=1, description="National Drug Code (unique ID)")
    name: str = Field(description="Brand name")
    generic_name: str = Field(default="", description="Generic name")
    tier: Optional[int] = Field(default=None, description="Formulary tier (1-5)")
    requires_pa: bool = Field(default=False, description="Prior authorization required")
    step_therapy: bool = Field(default=False, description="Step therapy required")
    quantity_limit: Optional[QuantityLimit] = None
    restrictions: Optional[list[str]] = None
    therapeutic_class: Optional[str] = Field(default=None, description="Drug class (e.g. Statins)")
    strength: Optional[str] = None
    form: Optional[str] = None


class StepTherapyRule(BaseModel):
    """Prerequisite drugs a patient must have tried before the governed drug."""

    drug_ndc: str = Field(description="Drug requiring step therapy")
    required_drugs: list[str] = Field(description="Must try these first (NDCs)")
    duration: Optional[int] = Field(default=None, ge=0, description="Trial length in days")
    exceptions: Optional[list[str]] = None

    @field_validator("required_drugs")
    @classmethod
    def validate_required_drugs(cls, v: list[str]) -> list[str]:
        """A rule without prerequisites is meaningless."""
        if not v:
            raise ValueError("required_drugs must contain at least one NDC")
        return v


class PriorAuthCriteria(BaseModel):
    """Approval requirements for a drug that needs prior authorization."""

    drug_ndc: str
    criteria: list[str] = Field(default_factory=list, description="Requirements for approval")
    duration: Optional[int] = Field(default=None, ge=0, description="Approval duration (days)")
    expedited_available: bool = False


class PriorAuthStatus(str, Enum):
    """Status of a prior authorization request."""
    PENDING = "pending"
    APPROVED = "approved"
    DENIED = "denied"


class PriorAuthRequest(BaseModel):
    """A submitted prior authorization request."""

    request_id: str
    drug_ndc: str
    patient_id: str
    prescriber_id: str
    status: PriorAuthStatus = PriorAuthStatus.PENDING
    submitted_at: datetime


class FilterCriteria(BaseModel):
    """Optional predicates for an advanced formulary filter.

    ``requires_pa`` and ``step_therapy`` only narrow the result when True;
    there is no index of drugs that do *not* carry a flag.
    """

    tier: Optional[int] = None
    requires_pa: Optional[bool] = None
    step_therapy: Optional[bool] = None
    therapeutic_class: Optional[str] = None
    limit: int = Field(default=100, ge=1)


class ComplianceResult(BaseModel):
    """Outcome of a step-therapy compliance check."""

    compliant: bool
    missing_drugs: list[str] = Field(default_factory=list)


class BulkImportResult(BaseModel):
    """Per-item success and failure counts of a bulk import."""

    success: int = 0
    failed: int = 0


class FormularyStats(BaseModel):
    """Cardinality summary of the formulary indexes."""

    total_drugs: int
    drugs_by_tier: dict[int, int]
    pa_required: int
    step_therapy: int
