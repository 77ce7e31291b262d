"""Catalog storefront service: product search, facets, and favorites."""

__version__ = "0.3.0"
