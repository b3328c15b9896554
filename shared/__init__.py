"""
Shared utilities for the feature permissions engine.

This package aggregates common building blocks used by the engine:

- config: Engine configuration via pydantic-settings
- logging: Structured logging with principal correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses
- test_helpers: Catalog and grant factories for tests

Do not import from service_* packages into shared/.
"""
