"""
Unit tests for the catalog service HTTP surface.
"""

import json

import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient

from shared.lifecycle import LifecycleState
from service_catalog.app.main import CatalogService


KEY = "Project_RedisLocal_getAllProducts"

EXPECTED_PRODUCTS = [
    {"id": 1, "name": "Produto 1"},
    {"id": 2, "name": "Produto 2"},
    {"id": 3, "name": "Produto 3"},
    {"id": 4, "name": "Produto 4"},
]


class TestCatalogService:
    """Test cases for CatalogService."""

    @pytest.fixture
    def catalog_service(self, catalog_config, redis_cache, stub_source):
        """Create CatalogService with in-memory handles."""
        return CatalogService(config=catalog_config, cache=redis_cache, source=stub_source)

    @pytest.fixture
    def client(self, catalog_service):
        """Create test client."""
        return TestClient(catalog_service.app)

    def test_service_initialization(self, catalog_service, redis_cache):
        assert catalog_service.service_name == "catalog"
        assert catalog_service.port == 2000
        assert catalog_service.cache is redis_cache
        assert catalog_service.catalog.key == KEY
        assert catalog_service.lifecycle_resources() == [redis_cache]
        assert catalog_service.app.state.catalog_service is catalog_service

    def test_get_products_with_empty_cache(self, client, fake_redis, stub_source):
        response = client.get("/")

        assert response.status_code == 200
        assert response.json() == EXPECTED_PRODUCTS
        assert json.loads(fake_redis.store[KEY]) == EXPECTED_PRODUCTS
        assert stub_source.calls == 1

    def test_get_products_served_from_cache(self, client, fake_redis, stub_source):
        fake_redis.store[KEY] = json.dumps([{"id": 9, "name": "Cached"}])

        response = client.get("/")

        assert response.status_code == 200
        assert response.json() == [{"id": 9, "name": "Cached"}]
        assert stub_source.calls == 0

    def test_get_products_twice_queries_origin_once(self, client, stub_source):
        first = client.get("/")
        second = client.get("/")

        assert first.json() == second.json() == EXPECTED_PRODUCTS
        assert stub_source.calls == 1

    def test_get_products_cache_unavailable(self, client, fake_redis):
        fake_redis.fail = True

        response = client.get("/")

        assert response.status_code == 503
        data = response.json()
        assert data["code"] == "CACHE_UNAVAILABLE"
        assert data["details"] == {"operation": "get", "key": KEY}

    def test_get_products_origin_failure(self, catalog_config, redis_cache, fake_redis):
        class BrokenSource:
            async def get_all_products(self):
                raise RuntimeError("database exploded")

        service = CatalogService(config=catalog_config, cache=redis_cache, source=BrokenSource())
        client = TestClient(service.app)

        response = client.get("/")

        assert response.status_code == 502
        data = response.json()
        assert data["code"] == "ORIGIN_SOURCE_ERROR"
        assert data["message"] == "database exploded"
        assert data["details"] == {"query": "getAllProducts"}
        assert KEY not in fake_redis.store

    def test_get_products_unexpected_error(self, catalog_service):
        client = TestClient(catalog_service.app, raise_server_exceptions=False)

        with patch.object(catalog_service.catalog, "fetch_products", side_effect=RuntimeError("boom")):
            response = client.get("/")

        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL_ERROR"

    def test_clear_removes_entry(self, client, fake_redis):
        fake_redis.store[KEY] = json.dumps(EXPECTED_PRODUCTS)

        response = client.get("/clear")

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert KEY not in fake_redis.store

    def test_clear_without_entry(self, client, fake_redis):
        response = client.get("/clear")

        assert response.status_code == 200
        assert response.json() == {"ok": True}
        assert KEY not in fake_redis.store

    def test_clear_then_get_repopulates(self, client, stub_source):
        client.get("/")
        client.get("/clear")
        client.get("/")

        assert stub_source.calls == 2

    def test_clear_failure_is_reported(self, client, fake_redis):
        fake_redis.store[KEY] = json.dumps(EXPECTED_PRODUCTS)
        fake_redis.fail = True

        response = client.get("/clear")

        assert response.status_code == 503
        data = response.json()
        assert data["ok"] is False
        assert "Connection refused" in data["error"]

    def test_health_endpoint(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "catalog"
        assert data["status"] == "ok"
        assert data["dependencies"] == {"redis": "ok"}

    def test_health_endpoint_with_redis_down(self, client, fake_redis):
        fake_redis.fail = True

        response = client.get("/health")

        assert response.status_code == 503
        data = response.json()
        assert data["status"] == "degraded"
        assert data["dependencies"] == {"redis": "error"}

    def test_metrics_endpoint(self, client):
        client.get("/")
        client.get("/")

        response = client.get("/metrics")

        assert response.status_code == 200
        body = response.text
        assert 'cache_lookups_total{query="getAllProducts",result="miss"} 1.0' in body
        assert 'cache_lookups_total{query="getAllProducts",result="hit"} 1.0' in body

    def test_cors_allows_any_origin(self, client):
        response = client.get("/", headers={"Origin": "http://frontend.local"})

        assert response.headers["access-control-allow-origin"] == "*"

    def test_request_id_is_echoed(self, client):
        response = client.get("/clear", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client):
        response = client.get("/clear")

        assert response.headers["X-Request-ID"]


class TestCatalogServiceRun:
    """Process entry behaviour."""

    def test_run_fails_when_cache_unreachable(self, catalog_config, redis_cache, fake_redis, stub_source):
        fake_redis.fail = True
        service = CatalogService(config=catalog_config, cache=redis_cache, source=stub_source)

        exit_code = service.run()

        assert exit_code == 1
        assert service.lifecycle.state is LifecycleState.STOPPED

    def test_main_exits_with_run_status(self):
        from service_catalog.app import main as main_module

        with patch.object(main_module.CatalogService, "run", return_value=0):
            with pytest.raises(SystemExit) as exc_info:
                main_module.main()

        assert exc_info.value.code == 0
