# services/catalog/src/catalog/stores/mongo_store.py
"""
MongoDB implementations of the store interfaces.

The product store runs Atlas Search stages for the primary path and plain
find/aggregate calls for the fallback path. It does not catch query errors:
deciding whether a failure means "fall back" or "give up" belongs to the
service layer.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..interfaces import FavoritesStoreInterface, ProductStoreInterface, RawDoc

logger = logging.getLogger(__name__)

# Insertion order doubles as recency; regex matches carry no score
RECENCY_SORT = {"_id": DESCENDING}


class MongoProductStore(ProductStoreInterface):
    def __init__(self, collection: Collection):
        self.collection = collection

    def search(
        self,
        search_stage: Dict[str, Any],
        limit: int,
        post_match: Optional[Dict[str, Any]] = None,
    ) -> List[RawDoc]:
        pipeline: List[Dict[str, Any]] = [{"$search": search_stage}]
        if post_match:
            pipeline.append({"$match": post_match})
        pipeline.extend([{"$sort": RECENCY_SORT}, {"$limit": limit}])
        return list(self.collection.aggregate(pipeline))

    def find(self, match: Dict[str, Any], limit: Optional[int] = None) -> List[RawDoc]:
        cursor = self.collection.find(match).sort(list(RECENCY_SORT.items()))
        if limit:
            cursor = cursor.limit(limit)
        return list(cursor)

    def find_one(self, query: Dict[str, Any]) -> Optional[RawDoc]:
        return self.collection.find_one(query)

    def search_meta(self, search_meta_stage: Dict[str, Any]) -> Optional[RawDoc]:
        docs = list(self.collection.aggregate([{"$searchMeta": search_meta_stage}]))
        return docs[0] if docs else None

    def aggregate(self, pipeline: List[Dict[str, Any]]) -> List[RawDoc]:
        return list(self.collection.aggregate(pipeline))

    def count(self) -> int:
        """Get total number of products"""
        try:
            return self.collection.estimated_document_count()
        except PyMongoError as e:
            logger.error(f"Count failed: {e}")
            return 0

    def health_check(self) -> bool:
        """Check if MongoDB is accessible"""
        try:
            self.collection.database.command("ping")
            return True
        except PyMongoError:
            return False


class MongoFavoritesStore(FavoritesStoreInterface):
    """Favorites keyed by (userId, productId), one document per pair."""

    def __init__(self, collection: Collection):
        self.collection = collection

    def list_product_ids(self, user_id: str) -> List[str]:
        docs = self.collection.find({"userId": user_id}, {"productId": 1})
        return [doc["productId"] for doc in docs if "productId" in doc]

    def exists(self, user_id: str, product_id: str) -> bool:
        return (
            self.collection.find_one({"userId": user_id, "productId": product_id})
            is not None
        )

    def upsert(self, user_id: str, product_id: str) -> None:
        self.collection.update_one(
            {"userId": user_id, "productId": product_id},
            {
                "$setOnInsert": {
                    "userId": user_id,
                    "productId": product_id,
                    "createdAt": datetime.now(timezone.utc),
                }
            },
            upsert=True,
        )

    def delete(self, user_id: str, product_id: str) -> None:
        self.collection.delete_one({"userId": user_id, "productId": product_id})
