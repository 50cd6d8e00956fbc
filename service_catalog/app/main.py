"""
Product catalog service: cache-aside HTTP front for the product collection.
"""

import sys
from typing import Dict, List, Optional

from fastapi.responses import JSONResponse

from shared.base_service import BaseService
from shared.config import ServiceConfig

from .cache.redis_cache import RedisCache
from .products.models import Product
from .products.service import ProductCatalogService
from .products.source import ProductSource


class CatalogService(BaseService):
    """Catalog service implementation."""

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        cache: Optional[RedisCache] = None,
        source: Optional[ProductSource] = None,
    ):
        super().__init__("catalog", config)

        # Process-wide handles, opened and closed by the lifecycle manager
        self.cache = cache or RedisCache(self.config.redis_url)
        self.source = source or ProductSource(self.config.origin_max_delay_seconds)

        self.catalog = ProductCatalogService(
            self.cache,
            self.source,
            key_prefix=self.config.redis_instance,
            ttl_seconds=self.config.cache_ttl_seconds,
            apply_ttl=self.config.apply_cache_ttl,
            metrics=self.metrics,
        )

        if not self.config.apply_cache_ttl:
            self.logger.info(
                "Cache TTL configured but not applied; entries persist until invalidated",
                cache_ttl_seconds=self.config.cache_ttl_seconds,
            )

        self._setup_catalog_routes()

        # Expose service instance via app state for introspection/testing
        self.app.state.catalog_service = self

    def _setup_catalog_routes(self):
        """Set up catalog-specific routes."""

        @self.app.get("/", response_model=List[Product])
        async def get_products():
            """Return all products, served from the cache when present."""
            return await self.catalog.fetch_products()

        @self.app.get("/clear")
        async def clear_products_cache():
            """Invalidate the cached product collection."""
            result = await self.catalog.invalidate_products()
            if not result.ok:
                return JSONResponse(
                    status_code=503,
                    content={"ok": False, "error": result.error},
                )
            return {"ok": True}

    async def _check_dependencies(self) -> Dict[str, str]:
        """Check catalog service dependencies."""
        return {"redis": "ok" if await self.cache.health_check() else "error"}

    def lifecycle_resources(self):
        return [self.cache]


def create_app():
    """Create catalog service application."""
    service = CatalogService()
    return service.app


def main():
    service = CatalogService()
    sys.exit(service.run())


if __name__ == "__main__":
    main()
