"""API request/response schemas."""

from typing import Optional
from pydantic import BaseModel, Field


class ComplianceCheckRequest(BaseModel):
    """Patient history submitted for a step-therapy check."""

    patient_history: list[str] = Field(default_factory=list, description="NDCs already tried")


class PriorAuthSubmission(BaseModel):
    """A new prior authorization request."""

    request_id: Optional[str] = Field(
        default=None, description="Caller-supplied id; generated when omitted"
    )
    drug_ndc: str
    patient_id: str
    prescriber_id: str


class ClassListResponse(BaseModel):
    """Known therapeutic class labels."""

    classes: list[str]
