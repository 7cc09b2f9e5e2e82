"""Canonical drug record persistence."""

from __future__ import annotations

from typing import Optional

from formulary_service.models.formulary import Drug
from formulary_service.services.keys import FormularyKeys
from formulary_service.services.kv_store import KeyValueStore


class DrugRecordStore:
    """Get/put/delete of drug records as JSON documents."""

    def __init__(self, store: KeyValueStore, keys: FormularyKeys) -> None:
        self.store = store
        self.keys = keys

    def get(self, ndc: str) -> Optional[Drug]:
        raw = self.store.get(self.keys.drug(ndc))
        if raw is None:
            return None
        return Drug.model_validate_json(raw)

    def put(self, drug: Drug) -> None:
        self.store.set(self.keys.drug(drug.ndc), drug.model_dump_json())

    def delete(self, ndc: str) -> bool:
        return self.store.delete(self.keys.drug(ndc)) > 0

    def exists(self, ndc: str) -> bool:
        return self.store.exists(self.keys.drug(ndc))
