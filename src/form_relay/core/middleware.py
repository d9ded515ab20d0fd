"""
Middleware components for request logging.
"""

import time
import uuid
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from loguru import logger


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        # Generate request ID
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id

        # Start timing
        start_time = time.time()

        client_ip = self._get_client_ip(request)
        request_logger = logger.bind(request_id=request_id)

        # Header values are never logged; they carry the webhook secret
        request_logger.info(
            f"Request started: {request.method} {request.url.path} from {client_ip}"
        )

        try:
            response = await call_next(request)

            process_time = round((time.time() - start_time) * 1000, 2)

            request_logger.info(
                f"Request completed: {request.method} {request.url.path} "
                f"-> {response.status_code} in {process_time}ms"
            )

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = str(process_time)

            return response

        except Exception as e:
            process_time = round((time.time() - start_time) * 1000, 2)
            request_logger.error(
                f"Request failed: {request.method} {request.url.path} "
                f"after {process_time}ms ({type(e).__name__}: {e})"
            )
            raise

    def _get_client_ip(self, request: Request) -> str:
        """Extract client IP address from request."""
        # Check for forwarded headers first
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            return forwarded_for.split(",")[0].strip()

        real_ip = request.headers.get("x-real-ip")
        if real_ip:
            return real_ip

        # Fallback to client IP
        return request.client.host if request.client else "unknown"
