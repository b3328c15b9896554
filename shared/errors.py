"""
Shared error handling for the feature permissions engine.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    code: str
    message: str
    details: Dict[str, Any] = {}


class PermissionsEngineException(Exception):
    """Base exception for the permissions engine."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            details=self.details
        )


class MalformedIdError(PermissionsEngineException, ValueError):
    """A feature id string or field combination is not valid."""

    def __init__(self, message: str = "Malformed feature id", details: Optional[Dict[str, Any]] = None):
        super().__init__("MALFORMED_FEATURE_ID", message, details)


class CatalogInconsistencyError(PermissionsEngineException):
    """The feature catalog contains a dangling or contradictory entry."""

    def __init__(self, message: str = "Feature catalog is inconsistent", details: Optional[Dict[str, Any]] = None):
        super().__init__("CATALOG_INCONSISTENCY", message, details)


class UnknownRoleError(PermissionsEngineException):
    """A role could not be resolved to grants."""

    def __init__(self, role_ids, details: Optional[Dict[str, Any]] = None):
        self.role_ids = tuple(role_ids)
        details = dict(details or {})
        details.setdefault("role_ids", list(self.role_ids))
        super().__init__(
            "UNKNOWN_ROLE",
            f"Unknown role(s): {', '.join(self.role_ids)}",
            details
        )


class ConfigurationError(PermissionsEngineException):
    """Invalid engine configuration."""

    def __init__(self, message: str = "Invalid configuration", details: Optional[Dict[str, Any]] = None):
        super().__init__("CONFIGURATION_ERROR", message, details)
