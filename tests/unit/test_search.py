"""Unit tests for token search and index filters."""

from formulary_service.models.formulary import Drug, FilterCriteria


def _ndcs(drugs):
    return {drug.ndc for drug in drugs}


class TestSearchByName:
    """Exact-token AND search."""

    def test_full_display_name_matches(self, loaded_service, lipitor):
        assert _ndcs(loaded_service.search_drugs("Lipitor")) == {lipitor.ndc}

    def test_generic_name_matches(self, loaded_service, crestor):
        assert _ndcs(loaded_service.search_drugs("rosuvastatin")) == {crestor.ndc}

    def test_substring_does_not_match(self, loaded_service):
        assert loaded_service.search_drugs("statin") == []

    def test_empty_and_short_queries(self, loaded_service):
        assert loaded_service.search_drugs("") == []
        assert loaded_service.search_drugs("li pi") == []

    def test_multiple_tokens_intersect(self, service):
        service.add_drug(Drug(ndc="a", name="Insulin Glargine", generic_name="Lantus", tier=3))
        service.add_drug(Drug(ndc="b", name="Insulin Lispro", generic_name="Humalog", tier=3))

        assert _ndcs(service.search_drugs("insulin")) == {"a", "b"}
        assert _ndcs(service.search_drugs("insulin lispro")) == {"b"}
        assert service.search_drugs("insulin humira") == []

    def test_short_tokens_in_query_are_ignored(self, service):
        service.add_drug(Drug(ndc="a", name="Insulin Glargine", generic_name="Lantus", tier=3))

        assert _ndcs(service.search_drugs("insulin u 100")) == {"a"}

    def test_limit_is_applied(self, service):
        for i in range(5):
            service.add_drug(Drug(ndc=f"ndc-{i}", name=f"Generic Tablet{i}", tier=1))

        results = service.search_drugs("generic", limit=2)

        assert [d.ndc for d in results] == ["ndc-0", "ndc-1"]

    def test_default_limit_from_service(self, store, clock):
        from formulary_service.services.formulary import FormularyService

        service = FormularyService(store, plan_id="p", clock=clock, search_default_limit=3)
        for i in range(5):
            service.add_drug(Drug(ndc=f"ndc-{i}", name="Generic", tier=1))

        assert len(service.search_drugs("generic")) == 3

    def test_deleted_records_are_dropped(self, loaded_service, lipitor):
        loaded_service.remove_drug(lipitor.ndc)

        assert loaded_service.search_drugs("lipitor") == []


class TestFilters:
    """Single-index filters."""

    def test_filter_by_tier(self, loaded_service, crestor):
        assert _ndcs(loaded_service.get_drugs_by_tier(3)) == {crestor.ndc}
        assert loaded_service.get_drugs_by_tier(9) == []

    def test_filter_by_authorization_required(self, loaded_service, lyrica, humira):
        assert _ndcs(loaded_service.get_drugs_requiring_pa()) == {lyrica.ndc, humira.ndc}

    def test_filter_by_step_therapy_required(self, loaded_service, crestor, lyrica, humira):
        assert _ndcs(loaded_service.get_drugs_with_step_therapy()) == {
            crestor.ndc,
            lyrica.ndc,
            humira.ndc,
        }

    def test_filter_by_class_is_case_insensitive(self, loaded_service, lipitor, crestor):
        assert _ndcs(loaded_service.get_drugs_by_class("statins")) == {lipitor.ndc, crestor.ndc}
        assert _ndcs(loaded_service.get_drugs_by_class("STATINS")) == {lipitor.ndc, crestor.ndc}


class TestAdvancedFilter:
    """Intersection of optional predicates."""

    def test_no_predicates_returns_empty(self, loaded_service):
        assert loaded_service.advanced_search(FilterCriteria()) == []

    def test_false_flags_do_not_contribute(self, loaded_service):
        assert loaded_service.advanced_search(FilterCriteria(requires_pa=False, step_therapy=False)) == []

    def test_tier_only(self, loaded_service, prozac):
        assert _ndcs(loaded_service.advanced_search(FilterCriteria(tier=1))) == {prozac.ndc}

    def test_pa_and_step_therapy(self, loaded_service, lyrica, humira):
        results = loaded_service.advanced_search(FilterCriteria(requires_pa=True, step_therapy=True))

        assert _ndcs(results) == {lyrica.ndc, humira.ndc}

    def test_class_and_step_therapy(self, loaded_service, crestor):
        results = loaded_service.advanced_search(
            FilterCriteria(therapeutic_class="Statins", step_therapy=True)
        )

        assert _ndcs(results) == {crestor.ndc}

    def test_disjoint_predicates(self, loaded_service):
        assert loaded_service.advanced_search(FilterCriteria(tier=1, requires_pa=True)) == []

    def test_limit(self, loaded_service):
        results = loaded_service.advanced_search(FilterCriteria(step_therapy=True, limit=2))

        assert len(results) == 2

    def test_default_limit_is_100(self, service):
        for i in range(105):
            service.add_drug(Drug(ndc=f"ndc-{i:03d}", name="Bulk", tier=2))

        assert len(service.advanced_search(FilterCriteria(tier=2))) == 100
