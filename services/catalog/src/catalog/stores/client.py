# services/catalog/src/catalog/stores/client.py
"""
MongoDB connection lifecycle.

One MongoConnection is created at application startup, shared by every
store (the driver pools connections internally), and closed at shutdown.
"""

import logging
from typing import Optional

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..config import CatalogConfig

logger = logging.getLogger(__name__)


class MongoConnection:
    def __init__(
        self,
        uri: Optional[str],
        db_name: str,
        server_selection_timeout_ms: int = 5000,
    ):
        if not uri:
            raise ValueError(
                "Missing MongoDB connection string. Set MONGODB_URI environment variable."
            )

        self.client = MongoClient(
            uri, serverSelectionTimeoutMS=server_selection_timeout_ms
        )
        self.db = self.client[db_name]
        logger.info(f"MongoDB client created for database '{db_name}'")

    @classmethod
    def from_config(cls, config: CatalogConfig) -> "MongoConnection":
        return cls(
            uri=config.mongodb_uri,
            db_name=config.mongodb_db_name,
            server_selection_timeout_ms=config.mongodb_server_selection_timeout_ms,
        )

    def collection(self, name: str) -> Collection:
        return self.db[name]

    def ping(self) -> bool:
        try:
            self.db.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"MongoDB ping failed: {e}")
            return False

    def close(self) -> None:
        self.client.close()
        logger.info("MongoDB client closed")
