"""
Shared error handling for the ACL Guard.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field
from opentelemetry import trace


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class AccessLayerException(Exception):
    """Base exception for ACL Guard errors."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        # Get trace ID from current span
        trace_id = None
        current_span = trace.get_current_span()
        if current_span and current_span.is_recording():
            span_context = current_span.get_span_context()
            if span_context.trace_id != 0:
                trace_id = f"{span_context.trace_id:032x}"

        return ErrorResponse(
            trace_id=trace_id,
            code=self.code,
            message=self.message,
            details=self.details
        )


class AuthenticationError(AccessLayerException):
    """Authentication-related errors."""

    status_code = 401

    def __init__(self, message: str = "Authentication failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHENTICATION_ERROR", message, details)


class MalformedPrincipalError(AuthenticationError):
    """Serialized principal payload could not be decoded."""

    def __init__(self, message: str = "Malformed principal payload", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.code = "MALFORMED_PRINCIPAL"


class AuthorizationError(AccessLayerException):
    """Authorization-related errors."""

    status_code = 403

    def __init__(self, message: str = "Authorization failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("AUTHORIZATION_ERROR", message, details)


class ValidationError(AccessLayerException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ServiceError(AccessLayerException):
    """Service-related errors."""

    status_code = 500

    def __init__(self, message: str = "Service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("SERVICE_ERROR", message, details)


class ConfigurationError(ServiceError):
    """Deployment wiring errors, never an authorization outcome."""

    def __init__(self, message: str = "ACL misconfigured", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.code = "CONFIGURATION_ERROR"


class HookNotRegisteredError(ConfigurationError):
    """Operation metadata names a subject hook nobody registered."""

    def __init__(self, hook_key: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Subject hook '{hook_key}' is not registered", details or {"hook_key": hook_key})
        self.code = "HOOK_NOT_REGISTERED"
        self.hook_key = hook_key


class MetadataConflictError(ConfigurationError):
    """Operation already carries ACL metadata."""

    def __init__(self, operation: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"Operation '{operation}' already has ACL metadata", details or {"operation": operation})
        self.code = "METADATA_CONFLICT"


class RuleDefinitionError(ServiceError):
    """Rule definition routine failed while building an ability."""

    def __init__(self, message: str = "Rule definition failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details)
        self.code = "RULE_DEFINITION_ERROR"
