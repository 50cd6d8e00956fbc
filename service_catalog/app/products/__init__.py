"""
Products package for the catalog service.
"""

from .models import Product, deserialize_products, serialize_products
from .source import ProductSource
from .service import InvalidationResult, ProductCatalogService, cache_key

__all__ = [
    "Product",
    "ProductSource",
    "ProductCatalogService",
    "InvalidationResult",
    "cache_key",
    "serialize_products",
    "deserialize_products",
]
