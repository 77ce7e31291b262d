# services/catalog/src/catalog/services/search_service.py
"""
Product search: primary index query with a regex fallback.

The primary path runs the compiled ``$search`` stage, followed by the
publication-year ``$match`` and only then the result cap. Its result is kept
only when it contains at least one document. An empty result and an index
failure are handled the same way:
the fallback ``$match`` query runs instead. A fallback failure is the only
error that reaches the caller.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from bson import ObjectId
from libs.catalog_shared.metrics import Metrics

from ..filters import build_query_string, compile_filters
from ..interfaces import ProductStoreInterface, RawDoc
from ..mapping import map_product
from ..models import CompiledQuery, Product, ProductFilters

logger = logging.getLogger(__name__)


class CatalogQueryError(Exception):
    """The last available query path failed; no further fallback exists."""


class SearchPath(str, Enum):
    PRIMARY = "primary"
    FALLBACK = "fallback"


class ProductSearchService:
    """
    Business layer for product listing and lookup.
    Depends only on ProductStoreInterface.
    """

    def __init__(
        self,
        store: ProductStoreInterface,
        index_name: str = "default",
        search_result_limit: int = 60,
        fallback_on_empty_primary: bool = True,
    ):
        self.store = store
        self.index_name = index_name
        self.search_result_limit = search_result_limit
        self.fallback_on_empty_primary = fallback_on_empty_primary

        self.search_stats = {"primary": 0, "fallback": 0, "primary_errors": 0}

    def fetch_products(self, filters: ProductFilters) -> List[Product]:
        """
        Return the products matching ``filters``.

        Raises:
            CatalogQueryError: if the fallback query fails
        """
        compiled = compile_filters(filters, self.index_name)

        if compiled.uses_index:
            docs = self._try_primary(compiled)
            if docs or (docs is not None and not self.fallback_on_empty_primary):
                self._record(SearchPath.PRIMARY)
                return self._map_all(docs, filters, SearchPath.PRIMARY)

        docs = self._run_fallback(compiled)
        self._record(SearchPath.FALLBACK)
        return self._map_all(docs, filters, SearchPath.FALLBACK)

    def fetch_product_by_id(self, product_id: str) -> Optional[Product]:
        """
        Resolve one product trying, in order: the external ``id`` field, the
        native ``_id`` as an ObjectId, the native ``_id`` as a raw string, and
        the ``ASIN`` field. Returns None when nothing matches.
        """
        for query in self._id_lookup_queries(product_id):
            doc = self.store.find_one(query)
            if doc is not None:
                return map_product(doc)

        logger.info(f"Product '{product_id}' not found by any identifier")
        return None

    def get_search_statistics(self) -> Dict[str, Any]:
        total_searches = self.search_stats["primary"] + self.search_stats["fallback"]
        return {
            "total_searches": total_searches,
            "search_breakdown": self.search_stats.copy(),
            "store_health": self.store.health_check(),
        }

    # -------------------------------------------------------------------------
    #  Internal helpers
    # -------------------------------------------------------------------------
    def _try_primary(self, compiled: CompiledQuery) -> Optional[List[RawDoc]]:
        """Index results (year filter included), or None if the index failed."""
        try:
            docs = self.store.search(
                compiled.search_stage,
                self.search_result_limit,
                post_match=compiled.search_post_match,
            )
        except Exception as e:
            self.search_stats["primary_errors"] += 1
            Metrics.counter("catalog_search_primary_errors_total")
            logger.warning(
                "Search index query failed, using fallback query", exc_info=e
            )
            return None

        if not docs:
            logger.info("Search index returned no results")
        return docs

    def _run_fallback(self, compiled: CompiledQuery) -> List[RawDoc]:
        try:
            return self.store.find(compiled.fallback_match)
        except Exception as e:
            logger.error("Fallback product query failed", exc_info=e)
            raise CatalogQueryError("Product query failed") from e

    def _map_all(
        self, docs: List[RawDoc], filters: ProductFilters, path: SearchPath
    ) -> List[Product]:
        products = [map_product(doc) for doc in docs]
        logger.info(
            f"Product query '{build_query_string(filters)}' returned "
            f"{len(products)} results via {path.value} path"
        )
        return products

    def _record(self, path: SearchPath) -> None:
        self.search_stats[path.value] += 1
        Metrics.counter("catalog_search_total", {"path": path.value})

    @staticmethod
    def _id_lookup_queries(product_id: str) -> List[Dict[str, Any]]:
        queries: List[Dict[str, Any]] = [{"id": product_id}]
        if ObjectId.is_valid(product_id):
            queries.append({"_id": ObjectId(product_id)})
        queries.append({"_id": product_id})
        queries.append({"ASIN": product_id})
        return queries
