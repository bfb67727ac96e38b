"""
Shared utilities for the ACL guard.

This package aggregates common building blocks consumed by the service:

- config: Settings via pydantic-settings
- logging: Structured logging with trace correlation
- metrics: Prometheus metrics helpers
- tracing: OpenTelemetry spans around decisions
- errors: Canonical error types and responses
- base_service: FastAPI service skeleton

Do not import from service_acl into shared/.
"""
