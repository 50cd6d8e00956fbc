"""
Product catalog service package.

Serves the product collection through a read-through (cache-aside) cache
backed by Redis:

- app.main: HTTP surface (`/` and `/clear`) and process entry point.
- app.products: Product models, the origin source, and the cache-aside service.
- app.cache: Redis adapter owning the cache connection.

Guidelines:
- The service is stateless; the cached collection lives in Redis.
- Entries are only refreshed by a miss or removed by explicit invalidation.
"""
