"""Service layer for formulary indexing and clinical workflows."""

from formulary_service.services.kv_store import (
    InMemoryKeyValueStore,
    KeyValueStore,
    KeyValueStoreError,
    RedisKeyValueStore,
    create_kv_store,
)
from formulary_service.services.keys import FormularyKeys
from formulary_service.services.record_store import DrugRecordStore
from formulary_service.services.indexer import FormularyIndexer
from formulary_service.services.search import FormularySearch
from formulary_service.services.step_therapy import StepTherapyEngine
from formulary_service.services.prior_auth import PriorAuthWorkflow
from formulary_service.services.catalog import FormularyCatalog
from formulary_service.services.formulary import FormularyService, create_formulary_service

__all__ = [
    "InMemoryKeyValueStore",
    "KeyValueStore",
    "KeyValueStoreError",
    "RedisKeyValueStore",
    "create_kv_store",
    "FormularyKeys",
    "DrugRecordStore",
    "FormularyIndexer",
    "FormularySearch",
    "StepTherapyEngine",
    "PriorAuthWorkflow",
    "FormularyCatalog",
    "FormularyService",
    "create_formulary_service",
]
