"""Catalog service configuration."""

from typing import Optional

from libs.catalog_shared.config import BaseServiceConfig
from pydantic import Field


class CatalogConfig(BaseServiceConfig):
    """Catalog service specific configuration."""

    # Service settings
    port: int = Field(8003, env="PORT")

    # MongoDB settings
    mongodb_uri: Optional[str] = Field(
        None,
        env="MONGODB_URI",
        description="MongoDB connection string; required outside of tests",
    )
    mongodb_db_name: str = Field("ic4302", env="MONGODB_DB_NAME")
    mongodb_products_collection: str = Field(
        "documents",
        env="MONGODB_PRODUCTS_COLLECTION",
        description="Collection holding the ingested catalog documents",
    )
    mongodb_favorites_collection: str = Field(
        "favorites", env="MONGODB_FAVORITES_COLLECTION"
    )
    mongodb_atlas_search_index: str = Field(
        "default",
        env="MONGODB_ATLAS_SEARCH_INDEX",
        description="Atlas Search index name used by $search and $searchMeta",
    )
    mongodb_server_selection_timeout_ms: int = Field(
        5000, env="MONGODB_SERVER_SELECTION_TIMEOUT_MS"
    )

    # Query settings
    search_result_limit: int = Field(
        60,
        env="SEARCH_RESULT_LIMIT",
        description="Maximum documents returned from the search index",
    )
    facet_bucket_limit: int = Field(
        20,
        env="FACET_BUCKET_LIMIT",
        description="Maximum buckets per facet group",
    )
    fallback_on_empty_primary: bool = Field(
        True,
        env="FALLBACK_ON_EMPTY_PRIMARY",
        description="Re-run the regex fallback when the index returns no matches",
    )

    # Session cookie holding the credential handed to the session verifier
    session_cookie_name: str = Field("session", env="SESSION_COOKIE_NAME")


# Singleton instance
config = CatalogConfig()
