# ABOUTME: Keeps drug records and their secondary indexes consistent on every write.
# ABOUTME: All record mutations go through FormularyIndexer, never the record store directly.
"""Index maintenance for the formulary catalog."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional, Set, Union

from formulary_service.models.formulary import BulkImportResult, Drug
from formulary_service.observability import formulary_metrics
from formulary_service.services.keys import FormularyKeys
from formulary_service.services.kv_store import KeyValueStore
from formulary_service.services.record_store import DrugRecordStore
from formulary_service.services.tokenizer import tokenize_names
from formulary_service.utils.error_codes import ErrorCode
from formulary_service.utils.logging import get_logger

logger = get_logger(__name__)


class FormularyIndexer:
    """Writes drug records together with their tier, flag, class and search indexes.

    Each call is a sequence of independent store operations. Nothing is rolled
    back if a later operation fails, and concurrent writers to the same NDC
    must be serialized by the caller.

    Args:
        store: Key-value store holding records and index sets
        keys: Key layout for the plan
        prune_stale_memberships: Read the previous record before an upsert and
            drop memberships implied by values that changed. When False,
            memberships for old tiers, classes and tokens accrete.
        track_search_terms: Maintain an NDC -> tokens reverse set so that
            ``remove`` also cleans search-term sets. When False, removed drugs
            stay listed under their tokens and search resolution skips them.
    """

    def __init__(
        self,
        store: KeyValueStore,
        keys: FormularyKeys,
        records: Optional[DrugRecordStore] = None,
        prune_stale_memberships: bool = True,
        track_search_terms: bool = False,
    ) -> None:
        self.store = store
        self.keys = keys
        self.records = records or DrugRecordStore(store, keys)
        self.prune_stale_memberships = prune_stale_memberships
        self.track_search_terms = track_search_terms

    def upsert(self, drug: Drug) -> None:
        """Add or replace a drug and bring its index memberships up to date."""
        try:
            self._upsert(drug)
        except Exception:
            formulary_metrics.record_write("upsert", "error")
            raise
        formulary_metrics.record_write("upsert", "success")

    def _upsert(self, drug: Drug) -> None:
        previous = self.records.get(drug.ndc) if self.prune_stale_memberships else None
        ndc = drug.ndc

        self.records.put(drug)

        if drug.tier is not None:
            self.store.sadd(self.keys.tier(drug.tier), ndc)

        if drug.requires_pa:
            self.store.sadd(self.keys.pa_required, ndc)
        else:
            self.store.srem(self.keys.pa_required, ndc)

        if drug.step_therapy:
            self.store.sadd(self.keys.step_therapy, ndc)
        else:
            self.store.srem(self.keys.step_therapy, ndc)

        if drug.therapeutic_class:
            self.store.sadd(self.keys.therapeutic_class(drug.therapeutic_class), ndc)

        tokens = tokenize_names(drug.name, drug.generic_name)
        for token in tokens:
            self.store.sadd(self.keys.search_term(token), ndc)
        if self.track_search_terms and tokens:
            self.store.sadd(self.keys.drug_terms(ndc), *tokens)

        if previous is not None:
            self._prune(previous, drug, set(tokens))

        logger.debug(f"Indexed drug {ndc} (tier={drug.tier}, tokens={len(tokens)})")

    def _prune(self, previous: Drug, current: Drug, current_tokens: Set[str]) -> None:
        ndc = current.ndc

        if previous.tier is not None and previous.tier != current.tier:
            self.store.srem(self.keys.tier(previous.tier), ndc)

        old_class = (previous.therapeutic_class or "").lower()
        new_class = (current.therapeutic_class or "").lower()
        if old_class and old_class != new_class:
            self.store.srem(self.keys.therapeutic_class(old_class), ndc)

        stale_tokens = set(tokenize_names(previous.name, previous.generic_name))
        if self.track_search_terms:
            stale_tokens |= self.store.smembers(self.keys.drug_terms(ndc))
        stale_tokens -= current_tokens
        for token in sorted(stale_tokens):
            self.store.srem(self.keys.search_term(token), ndc)
        if self.track_search_terms and stale_tokens:
            self.store.srem(self.keys.drug_terms(ndc), *sorted(stale_tokens))

    def update(self, ndc: str, changes: Mapping[str, Any]) -> bool:
        """Merge ``changes`` over the stored record and re-index it.

        Returns:
            False if the NDC is unknown, True otherwise
        """
        existing = self.records.get(ndc)
        if existing is None:
            formulary_metrics.record_write("update", ErrorCode.NOT_FOUND)
            return False

        merged = existing.model_dump()
        merged.update({field: value for field, value in changes.items() if field != "ndc"})
        self.upsert(Drug.model_validate(merged))
        formulary_metrics.record_write("update", "success")
        return True

    def remove(self, ndc: str) -> bool:
        """Delete a drug and its index memberships.

        Search-term memberships are only cleaned when term tracking is enabled.

        Returns:
            False if the NDC is unknown, True otherwise
        """
        drug = self.records.get(ndc)
        if drug is None:
            formulary_metrics.record_write("remove", ErrorCode.NOT_FOUND)
            return False

        self.records.delete(ndc)

        if drug.tier is not None:
            self.store.srem(self.keys.tier(drug.tier), ndc)
        self.store.srem(self.keys.pa_required, ndc)
        self.store.srem(self.keys.step_therapy, ndc)
        if drug.therapeutic_class:
            self.store.srem(self.keys.therapeutic_class(drug.therapeutic_class), ndc)

        if self.track_search_terms:
            terms_key = self.keys.drug_terms(ndc)
            for token in sorted(self.store.smembers(terms_key)):
                self.store.srem(self.keys.search_term(token), ndc)
            self.store.delete(terms_key)

        formulary_metrics.record_write("remove", "success")
        logger.debug(f"Removed drug {ndc}")
        return True

    def bulk_upsert(self, drugs: Iterable[Union[Drug, Mapping[str, Any]]]) -> BulkImportResult:
        """Upsert each drug independently; a failing item never aborts the batch."""
        result = BulkImportResult()
        for item in drugs:
            try:
                drug = item if isinstance(item, Drug) else Drug.model_validate(item)
                self.upsert(drug)
                result.success += 1
            except Exception as e:
                result.failed += 1
                logger.error(
                    f"Failed to import drug {_ndc_of(item)}: {e}",
                    extra={"code": ErrorCode.PARTIAL_BATCH_FAILURE, "plan_id": self.keys.plan_id},
                )

        formulary_metrics.record_bulk_import(result.success, result.failed)
        return result


def _ndc_of(item: Union[Drug, Mapping[str, Any]]) -> str:
    if isinstance(item, Drug):
        return item.ndc
    if isinstance(item, Mapping):
        return str(item.get("ndc", "<missing ndc>"))
    return "<invalid record>"
