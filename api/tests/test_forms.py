import pytest
from pydantic import ValidationError

from scout.forms import EXAMPLE_SEARCHES, build_filters, example_request, toggle
from scout.schemas import SearchRequest


class TestForms:
    def test_toggle_adds_and_removes_in_order(self):
        selected = toggle([], "Athletics")
        selected = toggle(selected, "Competitions")
        assert selected == ["Athletics", "Competitions"]
        assert toggle(selected, "Athletics") == ["Competitions"]

    def test_build_filters_trims_and_dedupes(self):
        filters = build_filters("  Lagos ", ["GitHub", "GitHub"], None)
        assert filters.location == "Lagos"
        assert filters.source_types == ["GitHub"]
        assert filters.accomplishment_areas == []

    def test_filters_are_immutable(self):
        filters = build_filters("Lagos")
        with pytest.raises(ValidationError):
            filters.location = "Accra"

    def test_example_request(self):
        req = example_request(0)
        assert req.query == EXAMPLE_SEARCHES[0]
        assert req.filters == build_filters()
        with pytest.raises(IndexError):
            example_request(len(EXAMPLE_SEARCHES))

    def test_query_is_trimmed_and_required(self):
        assert SearchRequest(query="  debate  ").query == "debate"
        with pytest.raises(ValidationError):
            SearchRequest(query=" \t ")
