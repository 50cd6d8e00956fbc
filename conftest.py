"""
Shared pytest fixtures for the catalog service tests.
"""

import asyncio
from typing import Dict, Optional

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from shared.config import get_config
from service_catalog.app.cache.redis_cache import RedisCache
from service_catalog.app.products.models import Product


class FakeRedis:
    """In-memory stand-in for the redis.asyncio client used by RedisCache."""

    def __init__(self):
        self.store: Dict[str, str] = {}
        self.expirations: Dict[str, Optional[int]] = {}
        self.fail = False
        self.closed = False
        self.calls = []

    def _check(self, command: str):
        self.calls.append(command)
        if self.fail:
            raise RedisConnectionError("Error 111 connecting to 127.0.0.1:6379. Connection refused.")

    async def ping(self):
        self._check("PING")
        return True

    async def get(self, key):
        self._check("GET")
        return self.store.get(key)

    async def set(self, key, value, ex=None):
        self._check("SET")
        self.store[key] = value
        self.expirations[key] = ex
        return True

    async def delete(self, *keys):
        self._check("DEL")
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                self.expirations.pop(key, None)
                removed += 1
        return removed

    async def aclose(self):
        self.closed = True


class StubSource:
    """Origin source that returns immediately and counts calls."""

    def __init__(self, products=None, delay: float = 0.0):
        self.products = products or [
            Product(id=1, name="Produto 1"),
            Product(id=2, name="Produto 2"),
            Product(id=3, name="Produto 3"),
            Product(id=4, name="Produto 4"),
        ]
        self.delay = delay
        self.calls = 0

    async def get_all_products(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return list(self.products)


@pytest.fixture
def fake_redis():
    """In-memory Redis client."""
    return FakeRedis()


@pytest.fixture
def redis_cache(fake_redis):
    """RedisCache wired to the in-memory client."""
    return RedisCache("redis://127.0.0.1:6379", client=fake_redis)


@pytest.fixture
def stub_source():
    """Instant origin source."""
    return StubSource()


@pytest.fixture
def catalog_config():
    """Catalog configuration with defaults, independent of the environment."""
    return get_config(
        "catalog",
        redis_url="redis://127.0.0.1:6379",
        redis_instance="Project_RedisLocal_",
        cache_ttl_seconds=86400,
        apply_cache_ttl=False,
        port=2000,
    )


@pytest.fixture
def make_source():
    """Factory for origin sources with custom products or delay."""
    return StubSource
