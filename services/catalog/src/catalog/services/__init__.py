"""Business logic layer for the catalog service."""

from .facet_service import FacetService
from .favorites_service import FavoritesService
from .search_service import CatalogQueryError, ProductSearchService

__all__ = [
    "CatalogQueryError",
    "FacetService",
    "FavoritesService",
    "ProductSearchService",
]
