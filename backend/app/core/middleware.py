"""
Custom middleware for the FastAPI application.
"""

import time
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.logging import log_request, log_response, set_correlation_id, get_correlation_id


class LoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging with correlation IDs."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process request and log with correlation ID."""
        correlation_id = set_correlation_id(request.headers.get("X-Correlation-ID"))

        log_request(request, request.method, request.url.path, correlation_id=correlation_id)

        start_time = time.time()
        response = None
        status_code = 500  # Default to 500 in case of exception
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            response_time_ms = (time.time() - start_time) * 1000
            log_response(status_code, response_time_ms, correlation_id)

            if response is not None:
                response.headers["X-Correlation-ID"] = correlation_id

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware for adding security headers."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Add security headers to response."""
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "no-referrer"
        # Wallet payloads must not be cached by intermediaries
        response.headers["Cache-Control"] = "no-store"

        correlation_id = get_correlation_id()
        if correlation_id:
            response.headers["X-Correlation-ID"] = correlation_id

        return response
