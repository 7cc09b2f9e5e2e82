"""Token search and index filters over the formulary catalog."""

from __future__ import annotations

from typing import Iterable, List, Optional

from formulary_service.models.formulary import Drug, FilterCriteria
from formulary_service.observability import formulary_metrics
from formulary_service.services.keys import FormularyKeys
from formulary_service.services.kv_store import KeyValueStore
from formulary_service.services.record_store import DrugRecordStore
from formulary_service.services.tokenizer import tokenize


class FormularySearch:
    """Answers name searches and boolean filters by set intersection.

    Index sets carry no ordering, so ids are sorted before a limit is applied
    to keep results stable between calls. Ids whose record no longer exists
    are dropped during resolution.
    """

    def __init__(
        self,
        store: KeyValueStore,
        keys: FormularyKeys,
        records: Optional[DrugRecordStore] = None,
        default_limit: int = 50,
    ) -> None:
        self.store = store
        self.keys = keys
        self.records = records or DrugRecordStore(store, keys)
        self.default_limit = default_limit

    def search_by_name(self, query: str, limit: Optional[int] = None) -> List[Drug]:
        """Drugs whose name tokens include every qualifying token of ``query``."""
        formulary_metrics.record_query("name")
        tokens = tokenize(query)
        if not tokens:
            return []

        ndcs = self.store.sinter([self.keys.search_term(token) for token in tokens])
        return self._resolve(ndcs, self.default_limit if limit is None else limit)

    def filter_by_tier(self, tier: int) -> List[Drug]:
        formulary_metrics.record_query("tier")
        return self._resolve(self.store.smembers(self.keys.tier(tier)))

    def filter_by_authorization_required(self) -> List[Drug]:
        formulary_metrics.record_query("pa_required")
        return self._resolve(self.store.smembers(self.keys.pa_required))

    def filter_by_step_therapy_required(self) -> List[Drug]:
        formulary_metrics.record_query("step_therapy")
        return self._resolve(self.store.smembers(self.keys.step_therapy))

    def filter_by_class(self, therapeutic_class: str) -> List[Drug]:
        formulary_metrics.record_query("class")
        return self._resolve(self.store.smembers(self.keys.therapeutic_class(therapeutic_class)))

    def advanced_filter(self, criteria: FilterCriteria) -> List[Drug]:
        """Intersect the index sets named by ``criteria``.

        Returns an empty list when no predicate is set rather than scanning
        the whole catalog.
        """
        formulary_metrics.record_query("advanced")
        sets: List[str] = []

        if criteria.tier is not None:
            sets.append(self.keys.tier(criteria.tier))

        if criteria.requires_pa:
            sets.append(self.keys.pa_required)

        if criteria.step_therapy:
            sets.append(self.keys.step_therapy)

        if criteria.therapeutic_class:
            sets.append(self.keys.therapeutic_class(criteria.therapeutic_class))

        if not sets:
            return []

        return self._resolve(self.store.sinter(sets), criteria.limit)

    def _resolve(self, ndcs: Iterable[str], limit: Optional[int] = None) -> List[Drug]:
        ordered = sorted(ndcs)
        if limit is not None:
            ordered = ordered[: max(limit, 0)]

        drugs: List[Drug] = []
        for ndc in ordered:
            drug = self.records.get(ndc)
            if drug is not None:
                drugs.append(drug)
        return drugs
