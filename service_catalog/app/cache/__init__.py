"""
Cache package for the catalog service.

Provides the Redis-backed store that holds serialized product collections.
"""

from .redis_cache import RedisCache

__all__ = ["RedisCache"]
