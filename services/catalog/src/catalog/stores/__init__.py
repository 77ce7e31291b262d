"""MongoDB-backed store implementations."""

from .client import MongoConnection
from .mongo_store import MongoFavoritesStore, MongoProductStore

__all__ = ["MongoConnection", "MongoFavoritesStore", "MongoProductStore"]
