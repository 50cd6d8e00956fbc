"""
Cache-aside access to the product collection.
"""

from contextlib import nullcontext
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from pydantic import ValidationError

from shared.errors import CacheUnavailableError, OriginSourceError
from shared.logging import get_logger
from .models import ProductCollection, deserialize_products, serialize_products
from .source import ProductSource

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector
    from ..cache.redis_cache import RedisCache


ALL_PRODUCTS_QUERY = "getAllProducts"


def cache_key(prefix: str, query: str = ALL_PRODUCTS_QUERY) -> str:
    """Build the namespaced key a query's result is stored under."""
    return f"{prefix}{query}"


@dataclass(frozen=True)
class InvalidationResult:
    """Outcome of an invalidation request."""
    ok: bool
    removed: bool = False
    error: Optional[str] = None


class ProductCatalogService:
    """Serves the product collection through the cache.

    On a hit the cached payload is returned without touching the origin. On a
    miss the origin is queried and its result written back under the same key.
    Concurrent misses are not coalesced: each one queries the origin and the
    last write wins.
    """

    def __init__(
        self,
        cache: "RedisCache",
        source: ProductSource,
        key_prefix: str,
        ttl_seconds: Optional[int] = None,
        apply_ttl: bool = False,
        metrics: Optional["MetricsCollector"] = None,
    ):
        self.cache = cache
        self.source = source
        self.key = cache_key(key_prefix)
        self.ttl_seconds = ttl_seconds
        self.apply_ttl = apply_ttl
        self.metrics = metrics
        self.logger = get_logger("catalog.products.service")

    async def fetch_products(self) -> ProductCollection:
        """Return the product collection, reading through the cache."""
        cached = await self.cache.get(self.key)

        if cached:
            try:
                products = deserialize_products(cached)
            except ValidationError as e:
                # Foreign or truncated payload; refetch and overwrite it
                self.logger.warning("Discarding malformed cache entry", key=self.key, error=str(e))
            else:
                self.logger.info("Returning data from cache", key=self.key)
                self._record_lookup(hit=True)
                return products

        self._record_lookup(hit=False)
        self.logger.info("Fetching data from origin source", query=ALL_PRODUCTS_QUERY)

        products = await self._fetch_from_origin()

        ttl = self.ttl_seconds if self.apply_ttl else None
        await self.cache.set(self.key, serialize_products(products), ttl_seconds=ttl)

        return products

    async def _fetch_from_origin(self) -> ProductCollection:
        timer = (
            self.metrics.time_operation("origin_fetch_duration_seconds", query=ALL_PRODUCTS_QUERY)
            if self.metrics
            else nullcontext()
        )
        with timer:
            try:
                return await self.source.get_all_products()
            except OriginSourceError:
                raise
            except Exception as e:
                self.logger.error("Origin source failed", query=ALL_PRODUCTS_QUERY, error=str(e))
                raise OriginSourceError(str(e), {"query": ALL_PRODUCTS_QUERY}) from e

    async def invalidate_products(self) -> InvalidationResult:
        """Remove the cached collection so the next fetch misses."""
        try:
            removed = await self.cache.delete(self.key)
        except CacheUnavailableError as e:
            self.logger.error("Error clearing cache", key=self.key, error=e.message)
            self._record_invalidation(ok=False)
            return InvalidationResult(ok=False, error=e.message)

        self.logger.info("Cache cleared", key=self.key, removed=bool(removed))
        self._record_invalidation(ok=True)
        return InvalidationResult(ok=True, removed=bool(removed))

    def _record_lookup(self, hit: bool):
        if self.metrics:
            self.metrics.record_cache_lookup(ALL_PRODUCTS_QUERY, hit)

    def _record_invalidation(self, ok: bool):
        if self.metrics:
            self.metrics.record_invalidation(ALL_PRODUCTS_QUERY, ok)
