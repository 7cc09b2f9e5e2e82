"""FormularyService facade composing the index, search and workflow components."""

from __future__ import annotations

import time
from typing import Any, Callable, Iterable, List, Mapping, Optional, Union

from formulary_service.config import Settings, settings as default_settings
from formulary_service.models.formulary import (
    BulkImportResult,
    ComplianceResult,
    Drug,
    FilterCriteria,
    FormularyStats,
    PriorAuthCriteria,
    PriorAuthRequest,
    StepTherapyRule,
)
from formulary_service.services.catalog import FormularyCatalog
from formulary_service.services.indexer import FormularyIndexer
from formulary_service.services.keys import FormularyKeys
from formulary_service.services.kv_store import KeyValueStore, create_kv_store
from formulary_service.services.prior_auth import DEFAULT_REQUEST_TTL_SECONDS, PriorAuthWorkflow
from formulary_service.services.record_store import DrugRecordStore
from formulary_service.services.search import FormularySearch
from formulary_service.services.step_therapy import StepTherapyEngine


class FormularyService:
    """One plan's formulary over a key-value store.

    Example:
        >>> service = FormularyService(InMemoryKeyValueStore(), plan_id="medicare-2024")
        >>> service.add_drug(Drug(ndc="00003-0293-21", name="Lipitor",
        ...                       generic_name="Atorvastatin", tier=2))
        >>> [d.name for d in service.search_drugs("lipitor")]
        ['Lipitor']
    """

    def __init__(
        self,
        store: KeyValueStore,
        plan_id: str = "default",
        clock: Optional[Callable[[], float]] = None,
        max_tier: int = 5,
        search_default_limit: int = 50,
        pa_request_ttl_seconds: int = DEFAULT_REQUEST_TTL_SECONDS,
        prune_stale_memberships: bool = True,
        track_search_terms: bool = False,
    ) -> None:
        self.store = store
        self.keys = FormularyKeys(plan_id)
        self.records = DrugRecordStore(store, self.keys)
        self.indexer = FormularyIndexer(
            store,
            self.keys,
            records=self.records,
            prune_stale_memberships=prune_stale_memberships,
            track_search_terms=track_search_terms,
        )
        self.search = FormularySearch(
            store, self.keys, records=self.records, default_limit=search_default_limit
        )
        self.step_therapy = StepTherapyEngine(store, self.keys)
        self.prior_auth = PriorAuthWorkflow(
            store,
            self.keys,
            request_ttl_seconds=pa_request_ttl_seconds,
            clock=clock or time.time,
        )
        self.catalog = FormularyCatalog(store, self.keys, search=self.search, max_tier=max_tier)

    @property
    def plan_id(self) -> str:
        return self.keys.plan_id

    # Drug records

    def add_drug(self, drug: Drug) -> None:
        self.indexer.upsert(drug)

    def get_drug(self, ndc: str) -> Optional[Drug]:
        return self.records.get(ndc)

    def update_drug(self, ndc: str, changes: Mapping[str, Any]) -> bool:
        return self.indexer.update(ndc, changes)

    def remove_drug(self, ndc: str) -> bool:
        return self.indexer.remove(ndc)

    def bulk_import_drugs(self, drugs: Iterable[Union[Drug, Mapping[str, Any]]]) -> BulkImportResult:
        return self.indexer.bulk_upsert(drugs)

    # Search and filters

    def search_drugs(self, query: str, limit: Optional[int] = None) -> List[Drug]:
        return self.search.search_by_name(query, limit)

    def get_drugs_by_tier(self, tier: int) -> List[Drug]:
        return self.search.filter_by_tier(tier)

    def get_drugs_requiring_pa(self) -> List[Drug]:
        return self.search.filter_by_authorization_required()

    def get_drugs_with_step_therapy(self) -> List[Drug]:
        return self.search.filter_by_step_therapy_required()

    def get_drugs_by_class(self, therapeutic_class: str) -> List[Drug]:
        return self.search.filter_by_class(therapeutic_class)

    def advanced_search(self, criteria: FilterCriteria) -> List[Drug]:
        return self.search.advanced_filter(criteria)

    # Step therapy

    def add_step_therapy_rule(self, rule: StepTherapyRule) -> None:
        self.step_therapy.set_rule(rule)

    def get_step_therapy_rule(self, drug_ndc: str) -> Optional[StepTherapyRule]:
        return self.step_therapy.get_rule(drug_ndc)

    def check_step_therapy_compliance(
        self, drug_ndc: str, patient_history: Iterable[str]
    ) -> ComplianceResult:
        return self.step_therapy.check_compliance(drug_ndc, patient_history)

    # Prior authorization

    def add_pa_criteria(self, criteria: PriorAuthCriteria) -> None:
        self.prior_auth.set_criteria(criteria)

    def get_pa_criteria(self, drug_ndc: str) -> Optional[PriorAuthCriteria]:
        return self.prior_auth.get_criteria(drug_ndc)

    def submit_pa_request(
        self, request_id: str, drug_ndc: str, patient_id: str, prescriber_id: str
    ) -> PriorAuthRequest:
        return self.prior_auth.submit_request(request_id, drug_ndc, patient_id, prescriber_id)

    def get_pa_status(self, request_id: str) -> Optional[PriorAuthRequest]:
        return self.prior_auth.get_status(request_id)

    def get_patient_pa_requests(self, patient_id: str) -> List[PriorAuthRequest]:
        return self.prior_auth.list_patient_requests(patient_id)

    # Statistics and export

    def get_formulary_stats(self) -> FormularyStats:
        return self.catalog.compute_stats()

    def get_therapeutic_classes(self) -> List[str]:
        return self.catalog.list_classes()

    def export_formulary(self) -> List[Drug]:
        return self.catalog.export_all()

    def clear_formulary(self) -> int:
        return self.catalog.clear()


def create_formulary_service(
    config: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
    clock: Optional[Callable[[], float]] = None,
) -> FormularyService:
    """
    Build a FormularyService from configuration.

    Args:
        config: Settings to use (defaults to the global settings)
        store: Pre-built store; created from ``config`` when omitted
        clock: Time source for PA timestamps and stub expiry

    Returns:
        Configured FormularyService
    """
    config = config or default_settings
    if store is None:
        store = create_kv_store(
            backend=config.store_backend,
            redis_url=config.redis_url,
            socket_timeout=config.redis_socket_timeout,
            clock=clock,
        )
    return FormularyService(
        store,
        plan_id=config.plan_id,
        clock=clock,
        max_tier=config.max_tier,
        search_default_limit=config.search_default_limit,
        pa_request_ttl_seconds=config.pa_request_ttl_seconds,
        prune_stale_memberships=config.index_prune_stale_memberships,
        track_search_terms=config.index_track_search_terms,
    )
