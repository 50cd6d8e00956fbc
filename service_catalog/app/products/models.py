"""
Product data models for the catalog service.
"""

from typing import List, Sequence

from pydantic import BaseModel, ConfigDict, TypeAdapter


class Product(BaseModel):
    """A single catalog item."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str


ProductCollection = List[Product]

_collection_adapter: TypeAdapter[ProductCollection] = TypeAdapter(ProductCollection)


def serialize_products(products: Sequence[Product]) -> str:
    """Encode a collection as the JSON array stored in the cache."""
    return _collection_adapter.dump_json(list(products)).decode("utf-8")


def deserialize_products(payload: str) -> ProductCollection:
    """Decode a cached JSON array back into products.

    Raises ``pydantic.ValidationError`` when the payload is not a JSON array
    of ``{id, name}`` objects.
    """
    return _collection_adapter.validate_json(payload)
