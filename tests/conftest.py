"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from formulary_service.api.app import create_app
from formulary_service.models.formulary import Drug, QuantityLimit
from formulary_service.services.formulary import FormularyService
from formulary_service.services.kv_store import InMemoryKeyValueStore


class FakeClock:
    """Manually advanced time source shared by the store and the workflows."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return InMemoryKeyValueStore(clock=clock)


@pytest.fixture
def service(store, clock):
    """FormularyService for a test plan over the in-memory store."""
    return FormularyService(store, plan_id="medicare-2024", clock=clock)


@pytest.fixture
def lipitor():
    return Drug(
        ndc="00003-0293-21",
        name="Lipitor",
        generic_name="Atorvastatin",
        tier=2,
        requires_pa=False,
        step_therapy=False,
        therapeutic_class="Statins",
        strength="20mg",
        form="Tablet",
        quantity_limit=QuantityLimit(quantity=30, days=30),
    )


@pytest.fixture
def crestor():
    return Drug(
        ndc="00186-0878-60",
        name="Crestor",
        generic_name="Rosuvastatin",
        tier=3,
        requires_pa=False,
        step_therapy=True,
        therapeutic_class="Statins",
        strength="10mg",
        form="Tablet",
        quantity_limit=QuantityLimit(quantity=30, days=30),
    )


@pytest.fixture
def lyrica():
    return Drug(
        ndc="00078-0357-15",
        name="Lyrica",
        generic_name="Pregabalin",
        tier=4,
        requires_pa=True,
        step_therapy=True,
        therapeutic_class="Anticonvulsants",
        strength="75mg",
        form="Capsule",
        restrictions=["Neuropathic pain only", "Max 450mg/day"],
    )


@pytest.fixture
def humira():
    return Drug(
        ndc="00173-0830-00",
        name="Humira",
        generic_name="Adalimumab",
        tier=5,
        requires_pa=True,
        step_therapy=True,
        therapeutic_class="Biologics",
        strength="40mg/0.8mL",
        form="Injection",
    )


@pytest.fixture
def prozac():
    return Drug(
        ndc="00002-7510-01",
        name="Prozac",
        generic_name="Fluoxetine",
        tier=1,
        therapeutic_class="Antidepressants",
        strength="20mg",
        form="Capsule",
    )


@pytest.fixture
def sample_drugs(lipitor, crestor, lyrica, humira, prozac):
    return [lipitor, crestor, lyrica, humira, prozac]


@pytest.fixture
def loaded_service(service, sample_drugs):
    """Service with the sample formulary imported."""
    result = service.bulk_import_drugs(sample_drugs)
    assert result.failed == 0
    return service


@pytest.fixture
def app(service):
    """Create FastAPI app for testing."""
    return create_app(service=service)


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)
