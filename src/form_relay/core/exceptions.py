"""
Custom exception classes for the Form Relay service.
"""

from typing import Any, Dict, Optional, Tuple
from starlette.status import (
    HTTP_401_UNAUTHORIZED,
    HTTP_405_METHOD_NOT_ALLOWED,
    HTTP_500_INTERNAL_SERVER_ERROR,
)


class BaseRelayException(Exception):
    """Base exception for all relay errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)


class AuthenticationError(BaseRelayException):
    """Raised when the webhook secret is missing or does not match."""

    def __init__(self, message: str = "Invalid secret", **kwargs):
        super().__init__(message, error_code=kwargs.pop("error_code", "INVALID_SECRET"), **kwargs)


class MethodNotAllowedError(BaseRelayException):
    """Raised for HTTP methods the endpoint does not serve."""

    def __init__(self, message: str = "Method not allowed", **kwargs):
        super().__init__(message, error_code=kwargs.pop("error_code", "METHOD_NOT_ALLOWED"), **kwargs)


class MalformedBodyError(BaseRelayException):
    """Raised when the inbound body is not a JSON object."""
    pass


class UpstreamError(BaseRelayException):
    """Raised when the form endpoint answers with a non-success status."""

    @property
    def status_code(self) -> Optional[int]:
        return self.details.get("status_code")


class ConfigurationError(BaseRelayException):
    """Raised when configuration is invalid."""
    pass


# HTTP status mapping
class HTTPExceptionHandler:
    """Handles conversion of relay exceptions to JSON error responses."""

    EXCEPTION_MAP = {
        AuthenticationError: HTTP_401_UNAUTHORIZED,
        MethodNotAllowedError: HTTP_405_METHOD_NOT_ALLOWED,
        MalformedBodyError: HTTP_500_INTERNAL_SERVER_ERROR,
        UpstreamError: HTTP_500_INTERNAL_SERVER_ERROR,
        ConfigurationError: HTTP_500_INTERNAL_SERVER_ERROR,
    }

    @classmethod
    def status_for(cls, exc: Exception) -> int:
        """Status code for an exception; anything unknown is a 500."""
        return cls.EXCEPTION_MAP.get(type(exc), HTTP_500_INTERNAL_SERVER_ERROR)

    @classmethod
    def to_error_response(cls, exc: Exception) -> Tuple[int, Dict[str, Any]]:
        """Convert an exception to a status code and ``{"error": ...}`` body."""
        if isinstance(exc, BaseRelayException):
            message = exc.message
        else:
            message = str(exc)

        return cls.status_for(exc), {"error": message or "Internal error"}


# Specific error factory functions
def create_upstream_error(status_code: int, body_text: str = "") -> UpstreamError:
    """Create an upstream error carrying the form endpoint's status and body."""
    message = f"Form submission error {status_code}"
    if body_text:
        message = f"{message} - {body_text}"

    return UpstreamError(
        message=message,
        error_code="UPSTREAM_FAILED",
        details={"status_code": status_code, "body": body_text}
    )


def create_malformed_body_error(reason: str) -> MalformedBodyError:
    """Create a malformed body error."""
    return MalformedBodyError(
        message=reason,
        error_code="MALFORMED_BODY",
        details={"reason": reason}
    )
