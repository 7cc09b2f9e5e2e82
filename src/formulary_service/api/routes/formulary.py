"""Formulary catalog endpoints: drug records, search, filters, stats and export."""

from typing import Any, Optional
from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response
from pydantic import ValidationError

from formulary_service.api.dependencies import get_formulary_service
from formulary_service.config import settings
from formulary_service.models.formulary import (
    BulkImportResult,
    Drug,
    FilterCriteria,
    FormularyStats,
)
from formulary_service.models.schema import ClassListResponse
from formulary_service.services.formulary import FormularyService

router = APIRouter()


@router.post("/drugs", response_model=Drug)
def upsert_drug(drug: Drug, service: FormularyService = Depends(get_formulary_service)) -> Drug:
    """Add or replace a drug and its index memberships."""
    service.add_drug(drug)
    return drug


@router.post("/drugs/bulk", response_model=BulkImportResult)
def bulk_import_drugs(
    drugs: list[Any] = Body(...),
    service: FormularyService = Depends(get_formulary_service),
) -> BulkImportResult:
    """Import many drugs; invalid entries are counted as failures, not rejected."""
    return service.bulk_import_drugs(drugs)


@router.get("/drugs/{ndc}", response_model=Drug)
def get_drug(ndc: str, service: FormularyService = Depends(get_formulary_service)) -> Drug:
    drug = service.get_drug(ndc)
    if drug is None:
        raise HTTPException(status_code=404, detail=f"Drug {ndc} not found")
    return drug


@router.patch("/drugs/{ndc}", response_model=Drug)
def update_drug(
    ndc: str,
    changes: dict[str, Any] = Body(...),
    service: FormularyService = Depends(get_formulary_service),
) -> Drug:
    """Apply a partial update; the NDC itself cannot change."""
    try:
        updated = service.update_drug(ndc, changes)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=exc.errors(include_url=False, include_context=False)) from exc
    if not updated:
        raise HTTPException(status_code=404, detail=f"Drug {ndc} not found")
    return service.get_drug(ndc)


@router.delete("/drugs/{ndc}", status_code=204)
def remove_drug(ndc: str, service: FormularyService = Depends(get_formulary_service)) -> Response:
    if not service.remove_drug(ndc):
        raise HTTPException(status_code=404, detail=f"Drug {ndc} not found")
    return Response(status_code=204)


@router.get("/search", response_model=list[Drug])
def search_drugs(
    q: str = Query("", description="Free-text name query"),
    limit: Optional[int] = Query(None, ge=1),
    service: FormularyService = Depends(get_formulary_service),
) -> list[Drug]:
    return service.search_drugs(q, limit)


@router.get("/filter", response_model=list[Drug])
def filter_drugs(
    tier: Optional[int] = None,
    requires_pa: Optional[bool] = None,
    step_therapy: Optional[bool] = None,
    therapeutic_class: Optional[str] = None,
    limit: Optional[int] = Query(None, ge=1),
    service: FormularyService = Depends(get_formulary_service),
) -> list[Drug]:
    """Intersect the requested index filters; no filters yields an empty list."""
    criteria = FilterCriteria(
        tier=tier,
        requires_pa=requires_pa,
        step_therapy=step_therapy,
        therapeutic_class=therapeutic_class,
        limit=limit or settings.filter_default_limit,
    )
    return service.advanced_search(criteria)


@router.get("/tiers/{tier}/drugs", response_model=list[Drug])
def drugs_by_tier(tier: int, service: FormularyService = Depends(get_formulary_service)) -> list[Drug]:
    return service.get_drugs_by_tier(tier)


@router.get("/pa-required", response_model=list[Drug])
def drugs_requiring_pa(service: FormularyService = Depends(get_formulary_service)) -> list[Drug]:
    return service.get_drugs_requiring_pa()


@router.get("/step-therapy", response_model=list[Drug])
def drugs_with_step_therapy(service: FormularyService = Depends(get_formulary_service)) -> list[Drug]:
    return service.get_drugs_with_step_therapy()


@router.get("/classes", response_model=ClassListResponse)
def therapeutic_classes(service: FormularyService = Depends(get_formulary_service)) -> ClassListResponse:
    return ClassListResponse(classes=service.get_therapeutic_classes())


@router.get("/classes/{label}/drugs", response_model=list[Drug])
def drugs_by_class(label: str, service: FormularyService = Depends(get_formulary_service)) -> list[Drug]:
    return service.get_drugs_by_class(label)


@router.get("/stats", response_model=FormularyStats)
def formulary_stats(service: FormularyService = Depends(get_formulary_service)) -> FormularyStats:
    return service.get_formulary_stats()


@router.get("/export", response_model=list[Drug])
def export_formulary(service: FormularyService = Depends(get_formulary_service)) -> list[Drug]:
    return service.export_formulary()
