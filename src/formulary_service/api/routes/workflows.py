"""Step-therapy and prior authorization workflow endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from formulary_service.api.dependencies import get_formulary_service
from formulary_service.models.formulary import (
    ComplianceResult,
    PriorAuthCriteria,
    PriorAuthRequest,
    StepTherapyRule,
)
from formulary_service.models.schema import ComplianceCheckRequest, PriorAuthSubmission
from formulary_service.services.formulary import FormularyService
from formulary_service.services.prior_auth import generate_request_id

step_therapy_router = APIRouter()
prior_auth_router = APIRouter()


@step_therapy_router.put("/rules", response_model=StepTherapyRule)
def set_step_therapy_rule(
    rule: StepTherapyRule, service: FormularyService = Depends(get_formulary_service)
) -> StepTherapyRule:
    service.add_step_therapy_rule(rule)
    return rule


@step_therapy_router.get("/rules/{ndc}", response_model=StepTherapyRule)
def get_step_therapy_rule(
    ndc: str, service: FormularyService = Depends(get_formulary_service)
) -> StepTherapyRule:
    rule = service.get_step_therapy_rule(ndc)
    if rule is None:
        raise HTTPException(status_code=404, detail=f"No step therapy rule for {ndc}")
    return rule


@step_therapy_router.post("/rules/{ndc}/compliance", response_model=ComplianceResult)
def check_compliance(
    ndc: str,
    request: ComplianceCheckRequest,
    service: FormularyService = Depends(get_formulary_service),
) -> ComplianceResult:
    """Check a patient's history against the drug's rule; drugs without a rule are compliant."""
    return service.check_step_therapy_compliance(ndc, request.patient_history)


@prior_auth_router.put("/criteria", response_model=PriorAuthCriteria)
def set_pa_criteria(
    criteria: PriorAuthCriteria, service: FormularyService = Depends(get_formulary_service)
) -> PriorAuthCriteria:
    service.add_pa_criteria(criteria)
    return criteria


@prior_auth_router.get("/criteria/{ndc}", response_model=PriorAuthCriteria)
def get_pa_criteria(
    ndc: str, service: FormularyService = Depends(get_formulary_service)
) -> PriorAuthCriteria:
    criteria = service.get_pa_criteria(ndc)
    if criteria is None:
        raise HTTPException(status_code=404, detail=f"No PA criteria for {ndc}")
    return criteria


@prior_auth_router.post("/requests", response_model=PriorAuthRequest, status_code=201)
def submit_pa_request(
    submission: PriorAuthSubmission, service: FormularyService = Depends(get_formulary_service)
) -> PriorAuthRequest:
    return service.submit_pa_request(
        submission.request_id or generate_request_id(),
        submission.drug_ndc,
        submission.patient_id,
        submission.prescriber_id,
    )


@prior_auth_router.get("/requests/{request_id}", response_model=PriorAuthRequest)
def get_pa_status(
    request_id: str, service: FormularyService = Depends(get_formulary_service)
) -> PriorAuthRequest:
    request = service.get_pa_status(request_id)
    if request is None:
        raise HTTPException(status_code=404, detail=f"PA request {request_id} not found or expired")
    return request


@prior_auth_router.get("/patients/{patient_id}/requests", response_model=list[PriorAuthRequest])
def patient_pa_requests(
    patient_id: str, service: FormularyService = Depends(get_formulary_service)
) -> list[PriorAuthRequest]:
    return service.get_patient_pa_requests(patient_id)
