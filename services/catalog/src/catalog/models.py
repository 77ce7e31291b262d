# services/catalog/src/catalog/models.py
"""
Catalog models: the raw document record, the product view model returned to
clients, the filter request, and facet buckets.
"""

from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

# -------------------------------------------------------------------------
# RAW CATALOG DOCUMENT
# -------------------------------------------------------------------------


class CatalogDocument(BaseModel):
    """
    Open record for a document in the products collection.

    Documents come from an external ingestion job and use human-readable
    keys ("Title", "Publication date", ...). Every declared field is optional
    and coerced leniently: a value of the wrong type is treated as missing
    rather than rejected. Undeclared keys are kept as extras.
    """

    mongo_id: Any = Field(None, alias="_id")
    id: Optional[str] = None
    asin: Optional[str] = Field(None, alias="ASIN")

    title: Optional[str] = Field(None, alias="Title")
    description: Optional[str] = Field(None, alias="Description")
    url: Optional[str] = None
    publisher: Optional[str] = Field(None, alias="Publisher")
    publication_date: Optional[str] = Field(None, alias="Publication date")
    edition: Optional[str] = Field(None, alias="Edition")
    language: Optional[str] = Field(None, alias="Language")
    customer_reviews: Optional[str] = Field(None, alias="Customer Reviews")
    entities: Optional[List[str]] = None

    image_url: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = None
    original_price: Optional[float] = None
    in_stock: Optional[bool] = None

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    @field_validator(
        "id",
        "asin",
        "title",
        "description",
        "url",
        "publisher",
        "publication_date",
        "edition",
        "language",
        "customer_reviews",
        "image_url",
        "category",
        mode="before",
    )
    @classmethod
    def lenient_str(cls, v):
        if v is None:
            return None
        if isinstance(v, str):
            return v
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return None

    @field_validator("price", "original_price", mode="before")
    @classmethod
    def lenient_float(cls, v):
        if v is None or isinstance(v, bool):
            return None
        if isinstance(v, (int, float)):
            return None if v != v else float(v)  # NaN check
        if isinstance(v, str):
            try:
                return float(v.replace(",", "").strip())
            except ValueError:
                return None
        return None

    @field_validator("in_stock", mode="before")
    @classmethod
    def lenient_bool(cls, v):
        return v if isinstance(v, bool) else None

    @field_validator("entities", mode="before")
    @classmethod
    def lenient_str_list(cls, v):
        if isinstance(v, str):
            return [v] if v.strip() else []
        if isinstance(v, (list, tuple)):
            return [str(item) for item in v if isinstance(item, (str, int, float))]
        return None


# -------------------------------------------------------------------------
# PRODUCT VIEW MODEL
# -------------------------------------------------------------------------


class Product(BaseModel):
    """
    Normalized product returned by every catalog endpoint.

    ``category``, ``rating`` and ``review_count`` are derived from the raw
    document rather than read from it directly.
    """

    id: str = Field(
        ...,
        description="External id when the document has one, otherwise the store id",
        example="6521f0c1e4b0a7d3c2f1a9b4",
    )
    title: str = Field(..., description="Product title", example="Foundation")
    description: str = Field(..., description="Product description")
    price: float = Field(0, description="Current price", example=9.99)
    original_price: Optional[float] = Field(
        None, description="Price before discount, if any", example=14.99
    )
    image_url: str = Field(..., description="Cover image URL or placeholder path")
    category: str = Field(
        ...,
        description="Explicit category, first entity, publisher, or 'General'",
        example="Isaac Asimov",
    )
    rating: float = Field(0, ge=0, description="Average rating parsed from reviews")
    review_count: int = Field(
        0, ge=0, description="Number of ratings parsed from reviews", example=1234
    )
    in_stock: bool = Field(True, description="Whether the product can be bought")

    # Optional enrichment
    url: Optional[str] = Field(None, description="Link to the source listing")
    publisher: Optional[str] = Field(None, description="Publisher name")
    publication_date: Optional[str] = Field(
        None, description="Publication date as found in the source", example="June 1, 2004"
    )
    entities: List[str] = Field(
        default_factory=list, description="Named entities extracted at ingestion"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "B000FC1PJI",
                "title": "Foundation",
                "description": "The first novel in the Foundation series.",
                "price": 7.99,
                "original_price": None,
                "image_url": "/placeholder.svg",
                "category": "Isaac Asimov",
                "rating": 4.6,
                "review_count": 21834,
                "in_stock": True,
                "publisher": "Spectra",
                "publication_date": "June 1, 2004",
                "entities": ["Isaac Asimov", "Hari Seldon"],
            }
        }
    )


# -------------------------------------------------------------------------
# FILTER REQUEST
# -------------------------------------------------------------------------


class ProductFilters(BaseModel):
    """
    Free-text search plus four multi-select facets.

    An empty facet list means "no constraint for this facet". The empty string
    inside a facet list selects documents where that field is missing or blank.
    Facets combine with AND; values inside one facet combine with OR.
    """

    search: Optional[str] = Field(
        None, description="Free-text search across title, description, entities, publisher"
    )
    publisher: List[str] = Field(default_factory=list, example=["Penguin", ""])
    language: List[str] = Field(default_factory=list, example=["English"])
    edition: List[str] = Field(default_factory=list)
    pub_years: List[str] = Field(default_factory=list, example=["2004", "2015"])

    @field_validator("search", mode="before")
    @classmethod
    def blank_search_is_none(cls, v):
        if not isinstance(v, str):
            return None
        return v if v.strip() else None

    @field_validator("publisher", "language", "edition", "pub_years", mode="before")
    @classmethod
    def trim_values(cls, v):
        """Trim each value but keep empty strings: they are the missing-field sentinel."""
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return [item.strip() for item in v if isinstance(item, str)]

    @property
    def has_facet_filters(self) -> bool:
        return any(
            len(values) > 0
            for values in (self.publisher, self.language, self.edition, self.pub_years)
        )


class CompiledQuery(BaseModel):
    """
    Both query forms for one filter request.

    ``search_stage`` is the Atlas Search stage body, or None when the index is
    skipped. ``search_post_match`` filters index results by publication year
    (years are not indexed) and must run before the result cap.
    ``fallback_match`` is a plain ``$match`` filter for the collection.
    """

    search_stage: Optional[Dict[str, Any]] = None
    search_post_match: Optional[Dict[str, Any]] = None
    fallback_match: Dict[str, Any] = Field(default_factory=dict)

    @property
    def uses_index(self) -> bool:
        return self.search_stage is not None


# -------------------------------------------------------------------------
# FACET MODELS
# -------------------------------------------------------------------------


class FacetBucket(BaseModel):
    """One available filter value and how many products carry it."""

    value: str = Field(..., description="Facet value; years are strings", example="Penguin")
    count: int = Field(..., ge=0, example=42)


class FacetGroup(BaseModel):
    buckets: List[FacetBucket] = Field(default_factory=list)


class FacetGroups(BaseModel):
    """Bucket groups per facet. A group is absent when nothing was aggregated."""

    publisher: Optional[FacetGroup] = None
    language: Optional[FacetGroup] = None
    edition: Optional[FacetGroup] = None
    pub_date: Optional[FacetGroup] = Field(None, alias="pubDate")

    model_config = ConfigDict(populate_by_name=True)


class FacetCounts(BaseModel):
    count: int = Field(0, ge=0, description="Total documents matching the search")
    facets: FacetGroups = Field(default_factory=FacetGroups)


# -------------------------------------------------------------------------
# RESPONSE / REQUEST BODIES
# -------------------------------------------------------------------------


class ProductsResponse(BaseModel):
    products: List[Product]


class ProductResponse(BaseModel):
    product: Product


class FacetsResponse(BaseModel):
    facets: FacetCounts


class FavoritesResponse(BaseModel):
    favorites: List[str] = Field(
        default_factory=list, description="Product ids favorited by the current user"
    )


class FavoriteStatusResponse(BaseModel):
    product_id: str = Field(..., alias="productId")
    favorited: bool = Field(
        False, description="Whether the current user favorited the product"
    )

    model_config = ConfigDict(populate_by_name=True)


class FavoriteRequest(BaseModel):
    product_id: Optional[str] = Field(None, alias="productId")

    model_config = ConfigDict(populate_by_name=True)
