"""
Custom exceptions for FixFlow.

Exception Hierarchy:
    FixFlowError (base)
    ├── ValidationError      - Malformed input (surfaced to caller, 400)
    ├── NotFoundError        - Unknown entity id (surfaced to caller, 404)
    └── ExternalServiceError - AI capability failure (degraded, never fatal)

Usage:
    ValidationError and NotFoundError are raised straight through to the caller.
    ExternalServiceError is caught by the notification policy and turned into
    a "do not notify" decision; the triage endpoint reports it as a 502.
"""

from typing import Optional, Dict, Any, List


class FixFlowError(Exception):
    """
    Base exception for all FixFlow errors.

    All custom exceptions inherit from this class, allowing callers to catch
    all application-specific errors with a single except clause if needed.
    """

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context for debugging
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-friendly error body."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class ValidationError(FixFlowError):
    """
    Input failed validation.

    Carries per-field messages in the same shape a form layer expects:
    ``{"customerPhone": ["Customer phone is required"]}``.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None
    ):
        self.field_errors = field_errors or {}
        super().__init__(message, {"field_errors": self.field_errors} if self.field_errors else None)

    @classmethod
    def for_field(cls, field_name: str, error: str) -> "ValidationError":
        """Shortcut for a single-field failure."""
        return cls(error, {field_name: [error]})


class NotFoundError(FixFlowError):
    """
    A record could not be resolved by id.

    Fatal to the operation that raised it - there is nothing to fall back to.
    """

    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        message = f"{entity} not found: {entity_id}"
        details = {"entity": entity, "id": entity_id}
        super().__init__(message, details)
        self.entity = entity
        self.entity_id = entity_id


class ExternalServiceError(FixFlowError):
    """
    The AI capability failed or returned something unusable.

    Typical causes:
    - No API key configured
    - Network error or timeout talking to the model provider
    - The model replied with empty or non-JSON content
    """

    status_code = 502

    def __init__(
        self,
        service: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = dict(details or {})
        error_details["service"] = service
        super().__init__(message, error_details)
        self.service = service
