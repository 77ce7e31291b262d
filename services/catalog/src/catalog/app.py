# services/catalog/src/catalog/app.py

import os
from typing import List, Optional

from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi_mcp import FastApiMCP
from libs.catalog_shared.context import AppContext
from libs.catalog_shared.errors import (
    not_found_error,
    service_error,
    unauthorized_error,
    validation_error,
)
from libs.catalog_shared.health import format_health_response
from libs.catalog_shared.logging import get_logger
from libs.catalog_shared.middleware import CorrelationIdMiddleware, MetricsMiddleware
from libs.catalog_shared.models import HealthResponse, HealthStatus, SuccessResponse

from . import __version__
from .auth import get_app_context
from .config import config
from .filters import parse_product_filters
from .models import (
    FacetsResponse,
    FavoriteRequest,
    FavoritesResponse,
    FavoriteStatusResponse,
    ProductResponse,
    ProductsResponse,
)
from .services.facet_service import FacetService
from .services.favorites_service import FavoritesService
from .services.search_service import CatalogQueryError, ProductSearchService
from .stores.client import MongoConnection
from .stores.mongo_store import MongoFavoritesStore, MongoProductStore

logger = get_logger(__name__, level=config.log_level)

app = FastAPI(
    title="Catalog Service",
    description="Search, filter and favorite products in the catalog",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware, exclude_paths=["/health", "/mcp"])
app.add_middleware(CorrelationIdMiddleware)


def init_services(connection: MongoConnection) -> None:
    """Build stores and services on top of one shared connection."""
    product_store = MongoProductStore(
        connection.collection(config.mongodb_products_collection)
    )
    favorites_store = MongoFavoritesStore(
        connection.collection(config.mongodb_favorites_collection)
    )

    app.state.mongo = connection
    app.state.search_service = ProductSearchService(
        store=product_store,
        index_name=config.mongodb_atlas_search_index,
        search_result_limit=config.search_result_limit,
        fallback_on_empty_primary=config.fallback_on_empty_primary,
    )
    app.state.facet_service = FacetService(
        store=product_store,
        index_name=config.mongodb_atlas_search_index,
        bucket_limit=config.facet_bucket_limit,
    )
    app.state.favorites_service = FavoritesService(store=favorites_store)


@app.on_event("startup")
def startup_event():
    if not os.environ.get("PYTEST_CURRENT_TEST"):
        connection = MongoConnection.from_config(config)
        init_services(connection)

        if not app.state.search_service.store.health_check():
            logger.warning("MongoDB is not reachable yet; queries will fail until it is")
        else:
            logger.info(
                f"Catalog initialized with {app.state.search_service.store.count()} products"
            )


@app.on_event("shutdown")
def shutdown_event():
    connection = getattr(app.state, "mongo", None)
    if connection is not None:
        connection.close()


def _ensure_services() -> None:
    if not hasattr(app.state, "search_service"):
        # Fallback initialization
        init_services(MongoConnection.from_config(config))


def get_search_service() -> ProductSearchService:
    _ensure_services()
    return app.state.search_service


def get_facet_service() -> FacetService:
    _ensure_services()
    return app.state.facet_service


def get_favorites_service() -> FavoritesService:
    _ensure_services()
    return app.state.favorites_service


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["products"],
    operation_id="catalog_health",
)
async def health(service: ProductSearchService = Depends(get_search_service)):
    try:
        store_ready = service.store.health_check()
        return format_health_response(
            status=HealthStatus.OK if store_ready else HealthStatus.WARNING,
            details={
                "store": "ready" if store_ready else "unavailable",
                "total_products": service.store.count() if store_ready else 0,
                "searches": service.get_search_statistics()["search_breakdown"],
            },
            version=app.version,
        )
    except Exception as e:
        logger.error("Health check failed", exc_info=e)
        return format_health_response(
            status=HealthStatus.ERROR,
            details={"store": "unavailable"},
            version=app.version,
        )


@app.get(
    "/products",
    response_model=ProductsResponse,
    tags=["products"],
    operation_id="search_products",
)
async def search_products(
    search: Optional[str] = Query(None, description="Free-text search"),
    publisher: List[str] = Query([], description="Publishers; '' selects missing"),
    language: List[str] = Query([]),
    edition: List[str] = Query([]),
    pub_year: List[str] = Query([], alias="pubYear"),
    service: ProductSearchService = Depends(get_search_service),
):
    """
    List products matching the search text and facet selections.

    Repeat a facet parameter to select several values (OR); different
    facets are combined with AND. Omitting a facet means all values.
    """
    filters = parse_product_filters(search, publisher, language, edition, pub_year)
    try:
        products = service.fetch_products(filters)
    except CatalogQueryError as e:
        logger.error("Error fetching products", exc_info=e)
        raise service_error("Error fetching products")
    return ProductsResponse(products=products)


@app.get(
    "/products/facets",
    response_model=FacetsResponse,
    response_model_exclude_none=True,
    tags=["products"],
    operation_id="get_product_facets",
)
async def get_product_facets(
    search: Optional[str] = Query(None, description="Free-text search"),
    service: FacetService = Depends(get_facet_service),
):
    """Available publisher, language, edition and year values with counts."""
    try:
        facets = service.get_facets(search)
    except CatalogQueryError as e:
        logger.error("Error computing facets", exc_info=e)
        raise service_error("Error fetching product facets")
    return FacetsResponse(facets=facets)


@app.get(
    "/products/{product_id}",
    response_model=ProductResponse,
    tags=["products"],
    operation_id="get_product",
)
async def get_product(
    product_id: str,
    service: ProductSearchService = Depends(get_search_service),
):
    """Look up one product by external id, store id, or ASIN."""
    try:
        product = service.fetch_product_by_id(product_id)
    except Exception as e:
        logger.error(f"Error fetching product {product_id}", exc_info=e)
        raise service_error("Error fetching product")

    if product is None:
        raise not_found_error("product", product_id)
    return ProductResponse(product=product)


@app.get("/favorites", response_model=FavoritesResponse, tags=["favorites"])
async def list_favorites(
    context: AppContext = Depends(get_app_context),
    service: FavoritesService = Depends(get_favorites_service),
):
    if not context.is_authenticated:
        return FavoritesResponse(favorites=[])

    try:
        return FavoritesResponse(favorites=service.list_favorites(context.user_id))
    except Exception as e:
        logger.error("Error listing favorites", exc_info=e)
        raise service_error("Error fetching favorites")


@app.get(
    "/favorites/{product_id}",
    response_model=FavoriteStatusResponse,
    tags=["favorites"],
)
async def get_favorite_status(
    product_id: str,
    context: AppContext = Depends(get_app_context),
    service: FavoritesService = Depends(get_favorites_service),
):
    """Whether the current user favorited one product; always false when anonymous."""
    if not context.is_authenticated:
        return FavoriteStatusResponse(product_id=product_id, favorited=False)

    try:
        favorited = service.is_favorited(context.user_id, product_id)
    except ValueError:
        raise validation_error("productId is required", field="productId")
    except Exception as e:
        logger.error("Error checking favorite", exc_info=e)
        raise service_error("Error fetching favorites")
    return FavoriteStatusResponse(product_id=product_id, favorited=favorited)


@app.post("/favorites", response_model=SuccessResponse, tags=["favorites"])
async def add_favorite(
    body: FavoriteRequest,
    context: AppContext = Depends(get_app_context),
    service: FavoritesService = Depends(get_favorites_service),
):
    if not context.is_authenticated:
        raise unauthorized_error()

    try:
        service.add_favorite(context.user_id, body.product_id or "")
    except ValueError:
        raise validation_error("productId is required", field="productId")
    except Exception as e:
        logger.error("Error adding favorite", exc_info=e)
        raise service_error("Error adding favorite")
    return SuccessResponse()


@app.delete("/favorites", response_model=SuccessResponse, tags=["favorites"])
async def remove_favorite(
    product_id: Optional[str] = Query(None, alias="productId"),
    context: AppContext = Depends(get_app_context),
    service: FavoritesService = Depends(get_favorites_service),
):
    if not context.is_authenticated:
        raise unauthorized_error()

    try:
        service.remove_favorite(context.user_id, product_id or "")
    except ValueError:
        raise validation_error("productId is required", field="productId")
    except Exception as e:
        logger.error("Error removing favorite", exc_info=e)
        raise service_error("Error removing favorite")
    return SuccessResponse()


# Expose the read-only catalog operations as MCP tools
mcp = FastApiMCP(
    app,
    name="catalog-service",
    description="Product catalog search, facets and lookup",
    describe_full_response_schema=True,
    include_tags=["products"],
    include_operations=[
        "search_products",
        "get_product_facets",
        "get_product",
        "catalog_health",
    ],
)
mcp.mount()
