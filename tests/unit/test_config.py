"""Tests for settings validation and environment loading."""

import pytest
from pydantic import ValidationError

from formulary_service.config import Settings
from formulary_service.services.formulary import create_formulary_service
from formulary_service.services.kv_store import InMemoryKeyValueStore


def test_defaults():
    config = Settings(_env_file=None)

    assert config.store_backend == "memory"
    assert config.pa_request_ttl_seconds == 30 * 24 * 60 * 60
    assert config.max_tier == 5
    assert config.index_prune_stale_memberships is True
    assert config.index_track_search_terms is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PLAN_ID", "medicare-2025")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("INDEX_TRACK_SEARCH_TERMS", "true")

    config = Settings(_env_file=None)

    assert config.plan_id == "medicare-2025"
    assert config.log_level == "DEBUG"
    assert config.index_track_search_terms is True


def test_invalid_values():
    with pytest.raises(ValidationError, match="log_level"):
        Settings(_env_file=None, log_level="verbose")
    with pytest.raises(ValidationError, match="max_tier"):
        Settings(_env_file=None, max_tier=0)
    with pytest.raises(ValidationError, match="plan_id"):
        Settings(_env_file=None, plan_id="acme:2025")
    with pytest.raises(ValidationError, match="plan_id"):
        Settings(_env_file=None, plan_id="med*")


def test_factory_uses_settings(clock):
    config = Settings(_env_file=None, plan_id="commercial", pa_request_ttl_seconds=60)

    service = create_formulary_service(config, clock=clock)

    assert isinstance(service.store, InMemoryKeyValueStore)
    assert service.plan_id == "commercial"
    service.submit_pa_request("PA-1", "ndc", "patient", "prescriber")
    clock.advance(60)
    assert service.get_pa_status("PA-1") is None
