# services/catalog/src/catalog/interfaces.py
"""
Storage-agnostic interfaces that define the contract between
business logic and storage implementations.

Stores deal in raw documents (plain dicts); mapping to view models is the
service layer's job.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

RawDoc = Dict[str, Any]


class ProductStoreInterface(ABC):
    """
    Abstract interface for the product document store.
    Business logic depends only on this interface, not concrete implementations.
    """

    @abstractmethod
    def search(
        self,
        search_stage: Dict[str, Any],
        limit: int,
        post_match: Optional[Dict[str, Any]] = None,
    ) -> List[RawDoc]:
        """
        Run a full-text index query.

        Args:
            search_stage: Body of the ``$search`` stage (index name included)
            limit: Maximum number of documents
            post_match: Optional ``$match`` applied to index hits before the limit

        Returns:
            Raw documents, most recently inserted first

        Raises:
            Any store error, including a missing or misconfigured index
        """
        pass

    @abstractmethod
    def find(self, match: Dict[str, Any], limit: Optional[int] = None) -> List[RawDoc]:
        """
        Run a structured filter against the collection.

        Args:
            match: ``$match`` filter (may contain ``$expr``)
            limit: Optional maximum number of documents

        Returns:
            Raw documents, most recently inserted first
        """
        pass

    @abstractmethod
    def find_one(self, query: Dict[str, Any]) -> Optional[RawDoc]:
        """Return the first document matching ``query`` or None."""
        pass

    @abstractmethod
    def search_meta(self, search_meta_stage: Dict[str, Any]) -> Optional[RawDoc]:
        """
        Run an index metadata (facet) query.

        Args:
            search_meta_stage: Body of the ``$searchMeta`` stage

        Returns:
            The single metadata document, or None when the index returned nothing
        """
        pass

    @abstractmethod
    def aggregate(self, pipeline: List[Dict[str, Any]]) -> List[RawDoc]:
        """Run an aggregation pipeline against the collection."""
        pass

    @abstractmethod
    def count(self) -> int:
        """
        Get total number of products in the store.

        Returns:
            Total product count
        """
        pass

    @abstractmethod
    def health_check(self) -> bool:
        """
        Check if the storage backend is healthy and accessible.

        Returns:
            True if healthy, False otherwise
        """
        pass


class FavoritesStoreInterface(ABC):
    """Per-user set of favorited product ids."""

    @abstractmethod
    def list_product_ids(self, user_id: str) -> List[str]:
        pass

    @abstractmethod
    def exists(self, user_id: str, product_id: str) -> bool:
        pass

    @abstractmethod
    def upsert(self, user_id: str, product_id: str) -> None:
        """Insert the (user, product) pair unless it is already present."""
        pass

    @abstractmethod
    def delete(self, user_id: str, product_id: str) -> None:
        pass
