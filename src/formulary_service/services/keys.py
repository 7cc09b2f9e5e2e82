"""Key layout for one formulary plan namespace."""

from __future__ import annotations

from formulary_service.utils.namespace import validate_plan_id


class FormularyKeys:
    """Builds every store key used by a plan.

    All keys share the ``formulary:{plan_id}`` prefix so a plan can be
    enumerated or cleared with a single pattern scan. Plan ids are checked by
    ``validate_plan_id`` so that pattern never reaches into another plan.
    """

    def __init__(self, plan_id: str = "default") -> None:
        self.plan_id = validate_plan_id(plan_id)
        self.prefix = f"formulary:{plan_id}"

    def drug(self, ndc: str) -> str:
        return f"{self.prefix}:drug:{ndc}"

    def tier(self, tier: int) -> str:
        return f"{self.prefix}:tier:{tier}"

    @property
    def pa_required(self) -> str:
        return f"{self.prefix}:pa-required"

    @property
    def step_therapy(self) -> str:
        return f"{self.prefix}:step-therapy"

    def therapeutic_class(self, label: str) -> str:
        return f"{self.prefix}:class:{label.lower()}"

    @property
    def class_pattern(self) -> str:
        return f"{self.prefix}:class:*"

    def class_label(self, key: str) -> str:
        """Recover the normalized label from a class index key."""
        return key[len(f"{self.prefix}:class:"):]

    def search_term(self, token: str) -> str:
        return f"{self.prefix}:search:{token}"

    def drug_terms(self, ndc: str) -> str:
        return f"{self.prefix}:terms:{ndc}"

    def step_rule(self, ndc: str) -> str:
        return f"{self.prefix}:step-rule:{ndc}"

    def pa_criteria(self, ndc: str) -> str:
        return f"{self.prefix}:pa-criteria:{ndc}"

    def pa_request(self, request_id: str) -> str:
        return f"{self.prefix}:pa-request:{request_id}"

    def patient_pa_requests(self, patient_id: str) -> str:
        return f"{self.prefix}:pa-requests:patient:{patient_id}"

    @property
    def all_pattern(self) -> str:
        return f"{self.prefix}:*"
