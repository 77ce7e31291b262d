# services/catalog/src/catalog/services/favorites_service.py
"""
Favorites: a per-user set of product ids.
"""

import logging
from typing import List

from ..interfaces import FavoritesStoreInterface

logger = logging.getLogger(__name__)


class FavoritesService:
    def __init__(self, store: FavoritesStoreInterface):
        self.store = store

    def list_favorites(self, user_id: str) -> List[str]:
        return self.store.list_product_ids(user_id)

    def is_favorited(self, user_id: str, product_id: str) -> bool:
        return self.store.exists(user_id, self._clean(product_id))

    def add_favorite(self, user_id: str, product_id: str) -> None:
        product_id = self._clean(product_id)
        self.store.upsert(user_id, product_id)
        logger.info(f"User {user_id} favorited product {product_id}")

    def remove_favorite(self, user_id: str, product_id: str) -> None:
        product_id = self._clean(product_id)
        self.store.delete(user_id, product_id)
        logger.info(f"User {user_id} removed favorite {product_id}")

    @staticmethod
    def _clean(product_id: str) -> str:
        if not product_id or not product_id.strip():
            raise ValueError("productId is required")
        return product_id.strip()
