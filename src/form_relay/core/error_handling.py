"""
Error classification and logging helpers for relay failures.
"""

import json
import time
from typing import Any

import httpx
from loguru import logger

from form_relay.core.exceptions import (
    BaseRelayException,
    ConfigurationError,
    MalformedBodyError,
    UpstreamError,
)


class ErrorClassifier:
    """Classifies errors into categories for log context."""

    # Expected HTTP/API exceptions
    HTTP_EXCEPTIONS = (
        httpx.HTTPError,
        httpx.TimeoutException,
        UpstreamError,
    )

    # Expected JSON/Data exceptions
    JSON_EXCEPTIONS = (
        json.JSONDecodeError,
        UnicodeDecodeError,
        MalformedBodyError,
    )

    # Expected business logic exceptions
    BUSINESS_EXCEPTIONS = (
        BaseRelayException,
        ConfigurationError,
    )

    @classmethod
    def classify_error(cls, error: Exception) -> str:
        """Classify an error into a category."""
        if isinstance(error, cls.HTTP_EXCEPTIONS):
            return "http"
        elif isinstance(error, cls.JSON_EXCEPTIONS):
            return "json"
        elif isinstance(error, cls.BUSINESS_EXCEPTIONS):
            return "business"
        else:
            return "unexpected"


class ErrorContext:
    """Context for error handling with metadata."""

    def __init__(
        self, operation: str, component: str, metadata: dict[str, Any] | None = None
    ):
        self.operation = operation
        self.component = component
        self.metadata = metadata or {}
        self.start_time = time.time()

    def get_context(self) -> dict[str, Any]:
        """Get error context as dictionary."""
        return {
            "operation": self.operation,
            "component": self.component,
            "duration_ms": int((time.time() - self.start_time) * 1000),
            "metadata": self.metadata,
        }


def log_error(error: Exception, context: ErrorContext) -> str:
    """
    Log an error with its category and context.

    Unexpected errors are logged with a traceback; expected ones are not.

    Returns:
        The error category
    """
    category = ErrorClassifier.classify_error(error)
    ctx = context.get_context()

    bound = logger.bind(error_type=category, **ctx)
    if category == "unexpected":
        bound.opt(exception=error).error(
            f"❌ Unexpected error in {context.component}.{context.operation}: "
            f"{type(error).__name__}: {error}"
        )
    else:
        bound.error(
            f"❌ {category.upper()} error in {context.component}.{context.operation}: {error}"
        )

    return category
