"""Formulary statistics, class listing, export and reset."""

from __future__ import annotations

from typing import Dict, List, Optional

from formulary_service.models.formulary import Drug, FormularyStats
from formulary_service.services.keys import FormularyKeys
from formulary_service.services.kv_store import KeyValueStore, iter_chunks
from formulary_service.services.search import FormularySearch
from formulary_service.utils.logging import get_logger

logger = get_logger(__name__)


class FormularyCatalog:
    """Whole-catalog views derived from the tier, flag and class indexes."""

    def __init__(
        self,
        store: KeyValueStore,
        keys: FormularyKeys,
        search: Optional[FormularySearch] = None,
        max_tier: int = 5,
    ) -> None:
        self.store = store
        self.keys = keys
        self.search = search or FormularySearch(store, keys)
        self.max_tier = max_tier

    def compute_stats(self) -> FormularyStats:
        """Count drugs per tier plus PA and step-therapy membership.

        Drugs without a tier or with a tier above ``max_tier`` are not counted.
        """
        drugs_by_tier: Dict[int, int] = {}
        for tier in range(1, self.max_tier + 1):
            drugs_by_tier[tier] = self.store.scard(self.keys.tier(tier))

        return FormularyStats(
            total_drugs=sum(drugs_by_tier.values()),
            drugs_by_tier=drugs_by_tier,
            pa_required=self.store.scard(self.keys.pa_required),
            step_therapy=self.store.scard(self.keys.step_therapy),
        )

    def list_classes(self) -> List[str]:
        """Normalized labels of every non-empty therapeutic class index."""
        labels = {self.keys.class_label(key) for key in self.store.scan_keys(self.keys.class_pattern)}
        return sorted(label for label in labels if label)

    def export_all(self) -> List[Drug]:
        """Every tiered drug, grouped by ascending tier."""
        drugs: List[Drug] = []
        for tier in range(1, self.max_tier + 1):
            drugs.extend(self.search.filter_by_tier(tier))
        return drugs

    def clear(self) -> int:
        """Delete every key in the plan namespace, including workflow records."""
        keys = self.store.scan_keys(self.keys.all_pattern)
        deleted = 0
        for chunk in iter_chunks(keys, 500):
            deleted += self.store.delete(*chunk)
        logger.warning(
            f"Cleared formulary plan {self.keys.plan_id} ({deleted} keys)",
            extra={"plan_id": self.keys.plan_id},
        )
        return deleted
