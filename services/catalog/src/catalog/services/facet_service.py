# services/catalog/src/catalog/services/facet_service.py
"""
Facet counts for the filter sidebar.

Facets are computed over the current search text only; facet selections do
not narrow them. The primary path is a single ``$searchMeta`` facet query.
Only a hard failure of that query triggers the fallback, which groups and
counts each field with plain aggregations (an empty facet result is
trusted).
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..filters import (
    PUBLICATION_DATE_FIELD,
    STRING_FACET_FIELDS,
    publication_year_expr,
    text_match,
    text_search_operator,
)
from ..interfaces import ProductStoreInterface, RawDoc
from ..models import FacetBucket, FacetCounts, FacetGroup, FacetGroups
from .search_service import CatalogQueryError

logger = logging.getLogger(__name__)

# Response facet name -> document field
FACET_FIELDS = dict(STRING_FACET_FIELDS)
PUB_DATE_FACET = "pubDate"

# Annual boundaries for the index date facet
FIRST_FACET_YEAR = 1900


def year_boundaries(first_year: int = FIRST_FACET_YEAR, last_year: Optional[int] = None) -> List[datetime]:
    """January 1st of every year from ``first_year`` through ``last_year + 1``."""
    last_year = last_year or datetime.now(timezone.utc).year
    return [
        datetime(year, 1, 1, tzinfo=timezone.utc)
        for year in range(first_year, last_year + 2)
    ]


def _bucket_value(raw_value: Any) -> str:
    if isinstance(raw_value, datetime):
        return str(raw_value.year)
    if raw_value is None:
        return ""
    return str(raw_value)


def normalize_buckets(raw_buckets: Optional[List[Dict[str, Any]]]) -> List[FacetBucket]:
    """Index buckets use ``_id``; grouped rows may use either key."""
    buckets = []
    for raw in raw_buckets or []:
        value = raw.get("value", raw.get("_id"))
        buckets.append(FacetBucket(value=_bucket_value(value), count=int(raw.get("count", 0))))
    return buckets


class FacetService:
    def __init__(
        self,
        store: ProductStoreInterface,
        index_name: str = "default",
        bucket_limit: int = 20,
    ):
        self.store = store
        self.index_name = index_name
        self.bucket_limit = bucket_limit

    def get_facets(self, search: Optional[str] = None) -> FacetCounts:
        """
        Raises:
            CatalogQueryError: if both the index and the fallback aggregations fail
        """
        search = search if search and search.strip() else None

        try:
            return self._index_facets(search)
        except Exception as e:
            logger.warning("Facet index query failed, grouping facets directly", exc_info=e)

        try:
            return self._fallback_facets(search)
        except Exception as e:
            logger.error("Fallback facet aggregation failed", exc_info=e)
            raise CatalogQueryError("Facet aggregation failed") from e

    # -------------------------------------------------------------------------
    #  Primary path
    # -------------------------------------------------------------------------
    def build_search_meta_stage(self, search: Optional[str]) -> Dict[str, Any]:
        operator = (
            text_search_operator(search)
            if search
            else {"exists": {"path": "Title"}}
        )
        facets: Dict[str, Any] = {
            name: {"type": "string", "path": field, "numBuckets": self.bucket_limit}
            for name, field in FACET_FIELDS.items()
        }
        facets[PUB_DATE_FACET] = {
            "type": "date",
            "path": PUBLICATION_DATE_FIELD,
            "boundaries": year_boundaries(),
        }
        return {
            "index": self.index_name,
            "facet": {"operator": operator, "facets": facets},
        }

    def _index_facets(self, search: Optional[str]) -> FacetCounts:
        meta = self.store.search_meta(self.build_search_meta_stage(search)) or {}
        raw_facets = meta.get("facet") or {}

        groups = {}
        for name in list(FACET_FIELDS) + [PUB_DATE_FACET]:
            group = raw_facets.get(name) or {}
            # Date boundaries with no documents still come back as buckets
            buckets = [b for b in normalize_buckets(group.get("buckets")) if b.count > 0]
            if name == PUB_DATE_FACET:
                # Same order and cap as the grouped year facet
                buckets = sorted(buckets, key=lambda b: b.value, reverse=True)
                buckets = buckets[: self.bucket_limit]
            if buckets:
                groups[name] = FacetGroup(buckets=buckets)

        count = meta.get("count") or {}
        total = count.get("lowerBound", 0) if isinstance(count, dict) else int(count)
        return FacetCounts(count=total, facets=FacetGroups(**groups))

    # -------------------------------------------------------------------------
    #  Fallback path
    # -------------------------------------------------------------------------
    def string_facet_pipeline(self, field: str, match: Dict[str, Any]) -> List[Dict[str, Any]]:
        # Missing, null and blank values share one "" bucket
        return [
            {"$match": match},
            {"$group": {"_id": {"$ifNull": [f"${field}", ""]}, "count": {"$sum": 1}}},
            {"$sort": {"count": -1}},
            {"$limit": self.bucket_limit},
        ]

    def year_facet_pipeline(self, match: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [
            {"$match": match},
            {"$addFields": {"_year": publication_year_expr()}},
            {"$match": {"_year": {"$ne": None}}},
            {"$group": {"_id": "$_year", "count": {"$sum": 1}}},
            {"$sort": {"_id": -1}},
            {"$limit": self.bucket_limit},
        ]

    def _run_buckets(self, pipeline: List[Dict[str, Any]]) -> List[FacetBucket]:
        rows: List[RawDoc] = self.store.aggregate(pipeline)
        return normalize_buckets(rows)

    def _fallback_facets(self, search: Optional[str]) -> FacetCounts:
        match = text_match(search)
        pipelines = {
            name: self.string_facet_pipeline(field, match)
            for name, field in FACET_FIELDS.items()
        }
        pipelines[PUB_DATE_FACET] = self.year_facet_pipeline(match)

        # The four groupings are independent of each other
        with ThreadPoolExecutor(max_workers=len(pipelines)) as executor:
            futures = {
                name: executor.submit(self._run_buckets, pipeline)
                for name, pipeline in pipelines.items()
            }
            results = {name: future.result() for name, future in futures.items()}

        groups = FacetGroups(
            **{
                name: FacetGroup(buckets=buckets)
                for name, buckets in results.items()
                if buckets
            }
        )
        total = sum(bucket.count for bucket in results["publisher"])
        logger.info(f"Computed fallback facets for search '{search or ''}'")
        return FacetCounts(count=total, facets=groups)
