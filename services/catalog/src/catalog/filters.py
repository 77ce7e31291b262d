# services/catalog/src/catalog/filters.py
"""
Filter compiler: turns a ProductFilters request into the two query forms the
search service needs.

* an Atlas Search ``$search`` stage body (the primary path), plus a
  publication-year ``$match`` that runs on the index results before the
  result cap, and
* a plain ``$match`` filter for the collection (the fallback path).

Facets combine with AND; the values selected inside one facet combine with OR.
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Sequence
from urllib.parse import urlencode

from .models import CompiledQuery, FacetCounts, FacetGroup, ProductFilters

# Document fields searched by free text, in both paths
TEXT_SEARCH_PATHS = ["Title", "Description", "entities", "Publisher"]

# facet attribute on ProductFilters -> document field
STRING_FACET_FIELDS = {
    "publisher": "Publisher",
    "language": "Language",
    "edition": "Edition",
}
PUBLICATION_DATE_FIELD = "Publication date"

FUZZY_OPTIONS = {"maxEdits": 2, "prefixLength": 2}

# Years outside this window are treated as malformed input
MIN_YEAR = 1
MAX_YEAR = 9999


# -------------------------------------------------------------------------
#  Selection helpers
# -------------------------------------------------------------------------
def split_selection(values: Sequence[str]) -> tuple:
    """Return (non-empty values, whether the empty-string sentinel was selected)."""
    real = [v.strip() for v in values if v.strip()]
    has_empty = any(not v.strip() for v in values)
    return real, has_empty


def parse_years(values: Iterable[str]) -> List[int]:
    """Parse year strings, silently dropping anything that is not a usable year."""
    years = []
    for value in values:
        try:
            year = int(str(value).strip())
        except ValueError:
            continue
        if MIN_YEAR <= year <= MAX_YEAR and year not in years:
            years.append(year)
    return years


def selects_missing(filters: ProductFilters) -> bool:
    """True when any string facet selection contains the empty-string sentinel."""
    return any(
        split_selection(getattr(filters, attr))[1] for attr in STRING_FACET_FIELDS
    )


def collapse_selection(
    selected: Sequence[str], available: Optional[FacetGroup]
) -> List[str]:
    """
    Reset a selection to "all" (empty list) when it covers every value the
    facet currently offers.
    """
    if not selected or available is None or not available.buckets:
        return list(selected)

    offered = {bucket.value for bucket in available.buckets}
    if offered.issubset(set(selected)):
        return []
    return list(selected)


def collapse_filters(filters: ProductFilters, facets: FacetCounts) -> ProductFilters:
    """Apply collapse_selection to every facet of ``filters`` against a FacetCounts."""
    groups = facets.facets
    return filters.model_copy(
        update={
            "publisher": collapse_selection(filters.publisher, groups.publisher),
            "language": collapse_selection(filters.language, groups.language),
            "edition": collapse_selection(filters.edition, groups.edition),
            "pub_years": collapse_selection(filters.pub_years, groups.pub_date),
        }
    )


# -------------------------------------------------------------------------
#  Primary path: Atlas Search
# -------------------------------------------------------------------------
def text_search_operator(search: str) -> Dict[str, Any]:
    return {
        "text": {
            "query": search,
            "path": list(TEXT_SEARCH_PATHS),
            "fuzzy": dict(FUZZY_OPTIONS),
        }
    }


def _search_facet_clause(field: str, values: Sequence[str]) -> Optional[Dict[str, Any]]:
    real, _ = split_selection(values)
    if not real:
        return None
    # text with a list query matches any of the values
    return {"text": {"query": real, "path": field}}


def build_search_stage(filters: ProductFilters, index_name: str) -> Optional[Dict[str, Any]]:
    """
    Build the ``$search`` stage body, or None when the index is skipped:
    the request has neither search text nor facet filters, or a facet
    selects missing/blank values (the index cannot see blank strings).

    Publication years are never part of this stage.
    """
    if not filters.search and not filters.has_facet_filters:
        return None
    if selects_missing(filters):
        return None

    must: List[Dict[str, Any]] = []
    if filters.search:
        must.append(text_search_operator(filters.search))

    for attr, field in STRING_FACET_FIELDS.items():
        clause = _search_facet_clause(field, getattr(filters, attr))
        if clause is not None:
            must.append(clause)

    if not must:
        # Only a year selection: match everything, years are matched after $search
        must.append({"exists": {"path": "Title"}})

    return {"index": index_name, "compound": {"must": must}}


# -------------------------------------------------------------------------
#  Fallback path: structured $match
# -------------------------------------------------------------------------
def text_match(search: Optional[str]) -> Dict[str, Any]:
    """Case-insensitive regex OR across the text fields. The text is matched literally."""
    if not search:
        return {}
    pattern = re.escape(search)
    return {
        "$or": [
            {path: {"$regex": pattern, "$options": "i"}} for path in TEXT_SEARCH_PATHS
        ]
    }


def _match_facet_clause(field: str, values: Sequence[str]) -> Optional[Dict[str, Any]]:
    real, has_empty = split_selection(values)

    options: List[Dict[str, Any]] = []
    if real:
        options.append({field: {"$in": real}})
    if has_empty:
        options.extend(
            [
                {field: {"$exists": False}},
                {field: None},
                {field: ""},
            ]
        )

    if not options:
        return None
    if len(options) == 1:
        return options[0]
    return {"$or": options}


def publication_year_expr(field: str = PUBLICATION_DATE_FIELD) -> Dict[str, Any]:
    """Aggregation expression: year of the parsed date string, or null."""
    return {
        "$year": {
            "$dateFromString": {
                "dateString": f"${field}",
                "onError": None,
                "onNull": None,
            }
        }
    }


def year_match(years: Sequence[int]) -> Optional[Dict[str, Any]]:
    """``$match`` body keeping documents published in one of ``years``."""
    if not years:
        return None
    return {"$expr": {"$in": [publication_year_expr(), list(years)]}}


def facet_match(filters: ProductFilters) -> Dict[str, Any]:
    """AND of one clause per active facet; each clause ORs the facet's values."""
    and_clauses: List[Dict[str, Any]] = []

    for attr, field in STRING_FACET_FIELDS.items():
        clause = _match_facet_clause(field, getattr(filters, attr))
        if clause is not None:
            and_clauses.append(clause)

    years_clause = year_match(parse_years(filters.pub_years))
    if years_clause is not None:
        and_clauses.append(years_clause)

    if not and_clauses:
        return {}
    return {"$and": and_clauses}


def build_fallback_match(filters: ProductFilters) -> Dict[str, Any]:
    """Combine the text regex and the facet predicates into one $match filter."""
    query: Dict[str, Any] = {}
    query.update(text_match(filters.search))
    query.update(facet_match(filters))
    return query


# -------------------------------------------------------------------------
#  Entry point
# -------------------------------------------------------------------------
def compile_filters(filters: ProductFilters, index_name: str = "default") -> CompiledQuery:
    """Compile a filter request into both query forms."""
    search_stage = build_search_stage(filters, index_name)
    return CompiledQuery(
        search_stage=search_stage,
        search_post_match=(
            year_match(parse_years(filters.pub_years)) if search_stage else None
        ),
        fallback_match=build_fallback_match(filters),
    )


# -------------------------------------------------------------------------
#  Query-string helpers
# -------------------------------------------------------------------------
def parse_product_filters(
    search: Optional[str] = None,
    publisher: Optional[List[str]] = None,
    language: Optional[List[str]] = None,
    edition: Optional[List[str]] = None,
    pub_year: Optional[List[str]] = None,
) -> ProductFilters:
    """Build filters from repeated query parameters; an absent parameter means 'all'."""
    return ProductFilters(
        search=search,
        publisher=publisher or [],
        language=language or [],
        edition=edition or [],
        pub_years=pub_year or [],
    )


def build_query_string(filters: ProductFilters) -> str:
    """Render filters back to the query string accepted by GET /products."""
    params = []
    if filters.search:
        params.append(("search", filters.search))
    params.extend(("publisher", v) for v in filters.publisher)
    params.extend(("language", v) for v in filters.language)
    params.extend(("edition", v) for v in filters.edition)
    params.extend(("pubYear", v) for v in filters.pub_years)
    return urlencode(params)
