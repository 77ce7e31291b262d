# services/catalog/tests/unit/test_filters.py
"""
Tests for the filter compiler and query-string helpers.
"""

from urllib.parse import parse_qs

import pytest

from catalog.filters import (
    FUZZY_OPTIONS,
    TEXT_SEARCH_PATHS,
    build_fallback_match,
    build_query_string,
    build_search_stage,
    collapse_filters,
    collapse_selection,
    compile_filters,
    parse_product_filters,
    parse_years,
    selects_missing,
    split_selection,
    year_match,
)
from catalog.models import FacetBucket, FacetCounts, FacetGroup, FacetGroups, ProductFilters


def _group(*values):
    return FacetGroup(buckets=[FacetBucket(value=v, count=1) for v in values])


@pytest.mark.unit
class TestSelectionHelpers:
    def test_split_selection_detects_sentinel(self):
        assert split_selection(["A", "", "B"]) == (["A", "B"], True)
        assert split_selection(["A"]) == (["A"], False)
        assert split_selection([]) == ([], False)

    def test_parse_years_drops_malformed_values(self):
        assert parse_years(["2004", "abc", "", "2015", "2004", "99999"]) == [2004, 2015]


@pytest.mark.unit
class TestEmptyMeansAll:
    def test_no_search_and_no_facets_skips_index(self):
        compiled = compile_filters(ProductFilters())

        assert compiled.search_stage is None
        assert compiled.uses_index is False
        assert compiled.fallback_match == {}
        assert compiled.search_post_match is None

    def test_empty_facet_adds_no_clause(self):
        filters = ProductFilters(publisher=["A"], language=[])
        match = build_fallback_match(filters)

        assert match == {"$and": [{"Publisher": {"$in": ["A"]}}]}

    def test_blank_search_is_treated_as_absent(self):
        filters = parse_product_filters(search="   ")
        assert filters.search is None
        assert compile_filters(filters).uses_index is False


@pytest.mark.unit
class TestFallbackMatch:
    def test_and_across_facets_or_within_facet(self):
        filters = ProductFilters(publisher=["A", "B"], language=["X"])
        match = build_fallback_match(filters)

        assert match == {
            "$and": [
                {"Publisher": {"$in": ["A", "B"]}},
                {"Language": {"$in": ["X"]}},
            ]
        }

    def test_empty_sentinel_is_ored_with_real_values(self):
        filters = ProductFilters(publisher=["Penguin", ""])
        clause = build_fallback_match(filters)["$and"][0]

        assert clause == {
            "$or": [
                {"Publisher": {"$in": ["Penguin"]}},
                {"Publisher": {"$exists": False}},
                {"Publisher": None},
                {"Publisher": ""},
            ]
        }

    def test_year_predicate_uses_parsed_publication_year(self):
        filters = ProductFilters(pub_years=["2004", "bogus"])
        clause = build_fallback_match(filters)["$and"][0]

        year_in = clause["$expr"]["$in"]
        assert year_in[1] == [2004]
        assert "$dateFromString" in year_in[0]["$year"]
        assert clause == year_match([2004])

    def test_only_malformed_years_adds_no_clause(self):
        assert build_fallback_match(ProductFilters(pub_years=["abc"])) == {}

    def test_search_text_is_escaped(self):
        match = build_fallback_match(ProductFilters(search="C++ (2nd)"))

        assert [list(c) for c in match["$or"]] == [[p] for p in TEXT_SEARCH_PATHS]
        assert match["$or"][0]["Title"] == {"$regex": r"C\+\+\ \(2nd\)", "$options": "i"}

    def test_search_and_facets_combine(self):
        match = build_fallback_match(ProductFilters(search="dune", edition=["1st"]))

        assert "$or" in match
        assert match["$and"] == [{"Edition": {"$in": ["1st"]}}]


@pytest.mark.unit
class TestSearchStage:
    def test_search_text_is_fuzzy_across_text_fields(self):
        stage = build_search_stage(ProductFilters(search="asimov"), "products")

        assert stage["index"] == "products"
        (text,) = stage["compound"]["must"]
        assert text["text"]["query"] == "asimov"
        assert text["text"]["path"] == TEXT_SEARCH_PATHS
        assert text["text"]["fuzzy"] == FUZZY_OPTIONS

    def test_facet_values_become_one_clause_each(self):
        stage = build_search_stage(
            ProductFilters(publisher=["A", "B"], language=["X"]), "default"
        )

        assert stage["compound"]["must"] == [
            {"text": {"query": ["A", "B"], "path": "Publisher"}},
            {"text": {"query": ["X"], "path": "Language"}},
        ]

    @pytest.mark.parametrize("attr", ["publisher", "language", "edition"])
    def test_empty_sentinel_skips_index(self, attr):
        filters = ProductFilters(search="dune", **{attr: ["Penguin", ""]})

        assert selects_missing(filters)
        assert build_search_stage(filters, "default") is None

        compiled = compile_filters(filters)
        assert compiled.uses_index is False
        assert compiled.search_post_match is None
        assert {"$exists": False} in [
            clause[next(iter(clause))] for clause in compiled.fallback_match["$and"][0]["$or"]
        ]

    def test_real_values_only_keep_index(self):
        assert not selects_missing(ProductFilters(publisher=["Penguin"]))
        assert not selects_missing(ProductFilters(pub_years=[""]))

    def test_years_are_matched_after_search_not_indexed(self):
        compiled = compile_filters(ProductFilters(pub_years=["2004"]))

        assert compiled.uses_index
        assert compiled.search_stage["compound"]["must"] == [
            {"exists": {"path": "Title"}}
        ]
        assert compiled.search_post_match == year_match([2004])
        assert compiled.search_post_match["$expr"]["$in"][1] == [2004]

    def test_year_match_empty(self):
        assert year_match([]) is None


@pytest.mark.unit
class TestCollapse:
    def test_full_selection_collapses_to_all(self):
        assert collapse_selection(["A", "B", "C"], _group("A", "B", "C")) == []

    def test_superset_also_collapses(self):
        assert collapse_selection(["A", "B", "Z"], _group("A", "B")) == []

    def test_partial_selection_is_kept(self):
        assert collapse_selection(["A"], _group("A", "B")) == ["A"]

    def test_missing_group_keeps_selection(self):
        assert collapse_selection(["A"], None) == ["A"]
        assert collapse_selection(["A"], FacetGroup()) == ["A"]

    def test_collapsed_filters_compile_like_unfiltered(self):
        facets = FacetCounts(
            count=3,
            facets=FacetGroups(publisher=_group("A", "B"), language=_group("X")),
        )
        filters = ProductFilters(publisher=["A", "B"], language=["X"])

        collapsed = collapse_filters(filters, facets)

        assert collapsed.publisher == []
        assert collapsed.language == []
        assert compile_filters(collapsed) == compile_filters(ProductFilters())


@pytest.mark.unit
class TestQueryString:
    def test_repeated_parameters(self):
        filters = ProductFilters(
            search="dune", publisher=["Ace", ""], pub_years=["2005"]
        )
        query = build_query_string(filters)

        parsed = parse_qs(query, keep_blank_values=True)
        assert parsed == {
            "search": ["dune"],
            "publisher": ["Ace", ""],
            "pubYear": ["2005"],
        }

    def test_parse_then_render_preserves_selection(self):
        filters = parse_product_filters(
            search="dune", publisher=["Ace"], language=["English"], pub_year=["2005"]
        )
        parsed = parse_qs(build_query_string(filters))

        again = parse_product_filters(
            search=parsed["search"][0],
            publisher=parsed.get("publisher"),
            language=parsed.get("language"),
            edition=parsed.get("edition"),
            pub_year=parsed.get("pubYear"),
        )
        assert again == filters

    def test_empty_filters_render_empty(self):
        assert build_query_string(ProductFilters()) == ""
