"""
Unit tests for guard settings, error responses and tracing helpers.
"""

import pytest

from shared.config import get_settings
from shared.errors import (
    AccessLayerException, AuthorizationError, ConfigurationError, HookNotRegisteredError,
    MetadataConflictError, ServiceError,
)
from shared.metrics import MetricsCollector
from shared.tracing import trace_span


class TestSettings:
    """Test cases for AclSettings."""

    def test_defaults(self, monkeypatch):
        """Test default principal names and mode."""
        monkeypatch.delenv("ACL_GUARD_MODE", raising=False)
        settings = get_settings()

        assert settings.principal_header == "x-auth"
        assert settings.principal_field == "auth"
        assert settings.guard_mode == "lenient"

    def test_environment_overrides(self, monkeypatch):
        """Test ACL_ prefixed environment variables."""
        monkeypatch.setenv("ACL_GUARD_MODE", "strict")
        monkeypatch.setenv("ACL_PRINCIPAL_HEADER", "x-principal")

        settings = get_settings()

        assert settings.guard_mode == "strict"
        assert settings.principal_header == "x-principal"

    def test_rejects_unknown_mode(self):
        """Test guard mode is validated."""
        with pytest.raises(Exception):
            get_settings(guard_mode="permissive")


class TestErrors:
    """Test cases for the error hierarchy."""

    def test_status_codes(self):
        """Test HTTP status per error family."""
        assert AuthorizationError().status_code == 403
        assert HookNotRegisteredError("docHook").status_code == 500
        assert AccessLayerException("X", "x").status_code == 400

    def test_configuration_errors_are_service_errors(self):
        """Test wiring errors share a base."""
        error = MetadataConflictError("getDocument")

        assert isinstance(error, ConfigurationError)
        assert isinstance(error, ServiceError)
        assert error.code == "METADATA_CONFLICT"
        assert error.details == {"operation": "getDocument"}

    def test_to_response(self):
        """Test error response rendering outside a span."""
        response = AuthorizationError("Access denied", {"action": "read"}).to_response()

        assert response.code == "AUTHORIZATION_ERROR"
        assert response.message == "Access denied"
        assert response.details == {"action": "read"}
        assert response.trace_id is None


class TestObservability:
    """Test cases for metrics and tracing helpers."""

    def test_collectors_are_isolated(self):
        """Test two collectors do not share samples."""
        first, second = MetricsCollector("a"), MetricsCollector("b")
        first.record_decision("ws", "read", "Document", False, 0.01)

        labels = {"transport": "ws", "action": "read", "subject": "Document", "decision": "deny"}
        assert first.get_sample_value("acl_decisions_total", labels) == 1.0
        assert second.get_sample_value("acl_decisions_total", labels) is None
        assert b"acl_decisions_total" in first.export()

    def test_trace_span_reraises(self):
        """Test spans never swallow errors."""
        with pytest.raises(KeyError):
            with trace_span("acl.decide", operation="getDocument"):
                raise KeyError("boom")

    def test_disabled_trace_span(self):
        """Test disabled spans yield nothing."""
        with trace_span("acl.decide", enabled=False) as span:
            assert span is None
