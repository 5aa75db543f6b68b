"""Exception hierarchy for the AutoNavigator core.

Collaborators (environment feed, actuation, route service) raise these.
The navigation session converts them into OperationResult values at the
tick boundary; anything else propagates to the caller.
"""

from typing import Any, Dict, Optional


class NavigatorError(Exception):
    """Base exception class for navigation core errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.error_code = error_code or "NAVIGATOR_ERROR"
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(NavigatorError):
    """Exception for invalid or unreadable navigator configuration."""

    def __init__(self, message: str, field: Optional[str] = None, value: Optional[Any] = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = value
        super().__init__(message, "CONFIGURATION_ERROR", details)


class EnvironmentUnavailableError(NavigatorError):
    """Raised by an environment feed that is not ready this tick."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "ENVIRONMENT_UNAVAILABLE", details)


class ActuationError(NavigatorError):
    """Raised when the environment rejects a move or click request."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "ACTUATION_ERROR", details)


class RouteServiceError(NavigatorError):
    """Raised by an external route service that failed to answer."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "ROUTE_SERVICE_ERROR", details)
