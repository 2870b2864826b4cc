"""
Shared utilities for the Cart Conditions service.

This package aggregates common building blocks consumed by the service:

- config: Service configuration via pydantic-settings
- logging: Structured logging with correlation context
- metrics: Prometheus metrics helpers
- errors: Canonical error types

Any cross-cutting logic should live here to avoid import cycles. Do not
import from service packages into shared/.
"""
