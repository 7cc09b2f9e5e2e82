"""Unit tests for the prior authorization workflow."""

from datetime import datetime, timezone

from formulary_service.models.formulary import PriorAuthCriteria, PriorAuthStatus
from formulary_service.services.prior_auth import DEFAULT_REQUEST_TTL_SECONDS, generate_request_id

THIRTY_DAYS = 30 * 24 * 60 * 60


def test_criteria_round_trip(service, lyrica):
    criteria = PriorAuthCriteria(
        drug_ndc=lyrica.ndc,
        criteria=[
            "Documented diagnosis of neuropathic pain",
            "Failed trial of generic gabapentin for 30+ days",
        ],
        duration=365,
        expedited_available=True,
    )
    service.add_pa_criteria(criteria)

    assert service.get_pa_criteria(lyrica.ndc) == criteria
    assert service.get_pa_criteria("unknown") is None


def test_submit_creates_pending_request(service, clock, lyrica):
    request = service.submit_pa_request("PA-1", lyrica.ndc, "patient-12345", "prescriber-789")

    assert request.status == PriorAuthStatus.PENDING
    assert request.submitted_at == datetime.fromtimestamp(clock(), tz=timezone.utc)

    stored = service.get_pa_status("PA-1")
    assert stored == request
    assert stored.status == "pending"


def test_request_expires_after_thirty_days(service, clock, lyrica):
    assert DEFAULT_REQUEST_TTL_SECONDS == THIRTY_DAYS
    service.submit_pa_request("PA-1", lyrica.ndc, "patient-1", "prescriber-1")

    clock.advance(THIRTY_DAYS - 1)
    assert service.get_pa_status("PA-1") is not None

    clock.advance(1)
    assert service.get_pa_status("PA-1") is None


def test_unknown_request(service):
    assert service.get_pa_status("never-submitted") is None


def test_resubmission_overwrites(service, clock, lyrica, humira):
    service.submit_pa_request("PA-1", lyrica.ndc, "patient-1", "prescriber-1")
    clock.advance(60)
    service.submit_pa_request("PA-1", humira.ndc, "patient-1", "prescriber-2")

    assert service.get_pa_status("PA-1").drug_ndc == humira.ndc


def test_patient_index_outlives_requests(service, clock, lyrica, humira):
    service.submit_pa_request("PA-old", lyrica.ndc, "patient-1", "prescriber-1")
    clock.advance(10 * 24 * 60 * 60)
    service.submit_pa_request("PA-new", humira.ndc, "patient-1", "prescriber-1")
    service.submit_pa_request("PA-other", humira.ndc, "patient-2", "prescriber-1")

    assert [r.request_id for r in service.get_patient_pa_requests("patient-1")] == ["PA-old", "PA-new"]

    clock.advance(25 * 24 * 60 * 60)

    assert [r.request_id for r in service.get_patient_pa_requests("patient-1")] == ["PA-new"]
    # The index itself still references the expired request
    assert service.store.smembers(service.keys.patient_pa_requests("patient-1")) == {"PA-old", "PA-new"}


def test_generated_request_ids_are_unique():
    ids = {generate_request_id() for _ in range(50)}

    assert len(ids) == 50
    assert all(request_id.startswith("PA-") for request_id in ids)
