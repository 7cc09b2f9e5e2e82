# ABOUTME: Tracks prior authorization criteria and submitted requests.
# ABOUTME: Requests are passive records that expire from the store after a fixed window.
"""Prior authorization workflow."""

from __future__ import annotations

from datetime import datetime, timezone
import time
import uuid
from typing import Callable, List, Optional

from formulary_service.models.formulary import (
    PriorAuthCriteria,
    PriorAuthRequest,
    PriorAuthStatus,
)
from formulary_service.observability import formulary_metrics
from formulary_service.services.keys import FormularyKeys
from formulary_service.services.kv_store import KeyValueStore
from formulary_service.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_REQUEST_TTL_SECONDS = 30 * 24 * 60 * 60


def generate_request_id() -> str:
    """New PA request id for callers that do not supply their own."""
    return f"PA-{uuid.uuid4().hex[:12]}"


class PriorAuthWorkflow:
    """Criteria lookup plus submission and status tracking of PA requests.

    Only submission happens here; approval and denial are decided elsewhere.
    The per-patient request index has no TTL, so it may list requests that
    have already expired.
    """

    def __init__(
        self,
        store: KeyValueStore,
        keys: FormularyKeys,
        request_ttl_seconds: int = DEFAULT_REQUEST_TTL_SECONDS,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        self.store = store
        self.keys = keys
        self.request_ttl_seconds = request_ttl_seconds
        self._clock = clock or time.time

    def set_criteria(self, criteria: PriorAuthCriteria) -> None:
        self.store.set(self.keys.pa_criteria(criteria.drug_ndc), criteria.model_dump_json())

    def get_criteria(self, drug_ndc: str) -> Optional[PriorAuthCriteria]:
        raw = self.store.get(self.keys.pa_criteria(drug_ndc))
        if raw is None:
            return None
        return PriorAuthCriteria.model_validate_json(raw)

    def submit_request(
        self,
        request_id: str,
        drug_ndc: str,
        patient_id: str,
        prescriber_id: str,
    ) -> PriorAuthRequest:
        """Record a pending request; an existing request with the same id is overwritten."""
        request = PriorAuthRequest(
            request_id=request_id,
            drug_ndc=drug_ndc,
            patient_id=patient_id,
            prescriber_id=prescriber_id,
            status=PriorAuthStatus.PENDING,
            submitted_at=datetime.fromtimestamp(self._clock(), tz=timezone.utc),
        )
        self.store.set(
            self.keys.pa_request(request_id),
            request.model_dump_json(),
            ttl_seconds=self.request_ttl_seconds,
        )
        self.store.sadd(self.keys.patient_pa_requests(patient_id), request_id)

        formulary_metrics.record_pa_request_submitted()
        logger.info(f"Submitted PA request {request_id} for drug {drug_ndc}")
        return request

    def get_status(self, request_id: str) -> Optional[PriorAuthRequest]:
        """Return the stored request, or None once it has expired or if it never existed."""
        raw = self.store.get(self.keys.pa_request(request_id))
        if raw is None:
            return None
        return PriorAuthRequest.model_validate_json(raw)

    def list_patient_requests(self, patient_id: str) -> List[PriorAuthRequest]:
        """Live requests for a patient, oldest submission first."""
        requests: List[PriorAuthRequest] = []
        for request_id in sorted(self.store.smembers(self.keys.patient_pa_requests(patient_id))):
            request = self.get_status(request_id)
            if request is not None:
                requests.append(request)
        requests.sort(key=lambda r: (r.submitted_at, r.request_id))
        return requests
