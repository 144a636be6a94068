"""
Shared utilities for the trace throttle mock.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with request correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- base_service: FastAPI app scaffolding (middleware, health, metrics, error handlers)

Do not import from service_* packages into shared/.
"""
