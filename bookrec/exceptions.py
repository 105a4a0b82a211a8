"""Custom exceptions for BookRec.

Defines specific exception types for better error handling and reporting.
The API layer turns these into JSON error responses using ``status_code``.
"""

from typing import Any, Dict, Optional


class BookRecException(Exception):
    """Base exception for BookRec errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None,
    ):
        """Initialize exception.

        Args:
            message: Human-readable error message
            status_code: HTTP status code for API responses
            details: Additional error details for debugging
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.details = details or {}


class DataSourceUnavailableError(BookRecException):
    """Raised when the purchase history or catalog source cannot be read."""

    def __init__(
        self,
        source: str,
        error: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        message = f"Data source '{source}' is unavailable"
        if error is not None:
            message = f"{message}: {error}"

        info: Dict[str, Any] = {"source": source}
        if error is not None:
            info["error"] = str(error)
            info["error_type"] = type(error).__name__
        if details:
            info.update(details)

        super().__init__(message=message, status_code=503, details=info)


class InvalidRequestError(BookRecException):
    """Raised when a recommendation request has invalid parameters."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, status_code=400, details=details)
