"""
Shared utilities for the product catalog cache service.

This package aggregates common building blocks consumed by services:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- lifecycle: Ordered startup and draining shutdown of process-wide handles
- base_service: FastAPI service skeleton wiring the above together

Do not import from service packages into shared/.
"""
