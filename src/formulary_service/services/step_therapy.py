"""Step-therapy rule storage and compliance checks."""

from __future__ import annotations

from typing import Iterable, Optional

from formulary_service.models.formulary import ComplianceResult, StepTherapyRule
from formulary_service.services.keys import FormularyKeys
from formulary_service.services.kv_store import KeyValueStore


class StepTherapyEngine:
    """Stores one prerequisite rule per drug and evaluates patient history against it.

    Rule ``duration`` and ``exceptions`` are kept for clinical review and are
    not evaluated here.
    """

    def __init__(self, store: KeyValueStore, keys: FormularyKeys) -> None:
        self.store = store
        self.keys = keys

    def set_rule(self, rule: StepTherapyRule) -> None:
        self.store.set(self.keys.step_rule(rule.drug_ndc), rule.model_dump_json())

    def get_rule(self, drug_ndc: str) -> Optional[StepTherapyRule]:
        raw = self.store.get(self.keys.step_rule(drug_ndc))
        if raw is None:
            return None
        return StepTherapyRule.model_validate_json(raw)

    def check_compliance(self, drug_ndc: str, patient_history: Iterable[str]) -> ComplianceResult:
        """Check whether every prerequisite of ``drug_ndc`` appears in the history.

        Args:
            drug_ndc: Drug the patient is being prescribed
            patient_history: NDCs the patient has already tried

        Returns:
            ComplianceResult listing missing prerequisites in rule order
        """
        rule = self.get_rule(drug_ndc)
        if rule is None:
            return ComplianceResult(compliant=True, missing_drugs=[])

        tried = set(patient_history)
        missing = [ndc for ndc in rule.required_drugs if ndc not in tried]
        return ComplianceResult(compliant=not missing, missing_drugs=missing)
