# services/catalog/src/catalog/mapping.py
"""
Convert raw catalog documents into Product view models.

Every function here is pure and total: a missing or malformed field falls
back to a default, it never raises.
"""

import re
from typing import Any, Mapping, Optional, Tuple, Union

from .models import CatalogDocument, Product

DEFAULT_DESCRIPTION = "Description not available."
DEFAULT_IMAGE_URL = "/placeholder.svg"
DEFAULT_TITLE = "Untitled"
DEFAULT_CATEGORY = "General"

_RATING_RE = re.compile(r"(\d+(\.\d+)?)")
_DECIMAL_RE = re.compile(r"\d+\.\d+")
_INTEGER_TOKEN_RE = re.compile(r"\d{1,3}(?:,\d{3})+(?!\d)|\d+")

RawDocument = Union[Mapping[str, Any], CatalogDocument]


def parse_rating(raw: Optional[str]) -> Tuple[float, int]:
    """
    Extract (rating, review_count) from a free-text review summary.

    The first number (decimal or not) is the rating. Integer tokens, with
    optional thousands separators, are then collected in order ignoring
    decimals; when there are at least two, the second is the review count.

        "4.5 out of 5 stars, 1,234 ratings" -> (4.5, 1234)
        "4.5 out of 5 stars"                -> (4.5, 0)
    """
    if not raw:
        return 0.0, 0

    rating_match = _RATING_RE.search(raw)
    rating = float(rating_match.group(1)) if rating_match else 0.0

    review_count = 0
    tokens = _INTEGER_TOKEN_RE.findall(_DECIMAL_RE.sub(" ", raw))
    if len(tokens) > 1:
        review_count = int(tokens[1].replace(",", ""))

    return rating, review_count


def normalize_category(doc: CatalogDocument) -> str:
    """Explicit category, else first entity, else publisher, else 'General'."""
    if doc.category:
        return doc.category

    if doc.entities:
        return doc.entities[0]

    return doc.publisher or DEFAULT_CATEGORY


def to_catalog_document(raw: RawDocument) -> CatalogDocument:
    if isinstance(raw, CatalogDocument):
        return raw
    return CatalogDocument.model_validate(dict(raw))


def resolve_product_id(doc: CatalogDocument) -> str:
    if doc.id:
        return doc.id
    return str(doc.mongo_id) if doc.mongo_id is not None else ""


def map_product(raw: RawDocument) -> Product:
    """Map one raw catalog document (dict or CatalogDocument) to a Product."""
    doc = to_catalog_document(raw)
    rating, review_count = parse_rating(doc.customer_reviews)

    return Product(
        id=resolve_product_id(doc),
        title=doc.title or DEFAULT_TITLE,
        description=doc.description or DEFAULT_DESCRIPTION,
        price=doc.price if doc.price is not None else 0,
        original_price=doc.original_price,
        image_url=doc.image_url or DEFAULT_IMAGE_URL,
        category=normalize_category(doc),
        rating=rating,
        review_count=review_count,
        in_stock=doc.in_stock if doc.in_stock is not None else True,
        url=doc.url,
        publisher=doc.publisher,
        publication_date=doc.publication_date,
        entities=list(doc.entities or []),
    )
