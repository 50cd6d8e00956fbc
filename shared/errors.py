"""
Shared error handling for the product catalog cache service.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel

from shared.logging import request_id_var


class ErrorResponse(BaseModel):
    """Standard error response format."""

    request_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = {}


class ServiceException(Exception):
    """Base exception for catalog services."""

    status_code = 500

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            request_id=request_id_var.get(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class CacheUnavailableError(ServiceException):
    """The cache store could not be reached or rejected a command."""

    status_code = 503

    def __init__(self, message: str = "Cache store unavailable", details: Optional[Dict[str, Any]] = None):
        super().__init__("CACHE_UNAVAILABLE", message, details)


class OriginSourceError(ServiceException):
    """The origin data source failed to produce a result."""

    status_code = 502

    def __init__(self, message: str = "Origin source failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("ORIGIN_SOURCE_ERROR", message, details)


class StartupError(ServiceException):
    """A process-wide handle could not be opened during startup."""

    def __init__(self, component: str, message: str = "Startup failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("STARTUP_FAILED", f"{component}: {message}", details)
        self.component = component
