"""API Middleware for request processing"""

import time
import re
from typing import Callable
from uuid import uuid4
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from app.core.config import settings
from app.core.logging_config import get_logger
from app.core.monitoring import MetricsCollector


# Configure structured logging
logger = get_logger(__name__)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """
    Middleware to add unique request ID to each request.

    Reuses the caller's X-Request-ID when present, otherwise generates a
    UUID, and adds it to:
    - Request state (accessible in route handlers)
    - Response headers (X-Request-ID)
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid4())
        request.state.request_id = request_id

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id
        return response


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to log all requests and responses with correlation IDs.

    Logs structured information including:
    - Request ID (correlation ID)
    - HTTP method and path
    - Request/response timing
    - Status code
    - Sensitive data redaction

    Request counts and durations are also recorded as Prometheus metrics.
    """

    # Patterns for sensitive data redaction
    SENSITIVE_PATTERNS = [
        (re.compile(r'"password"\s*:\s*"[^"]*"'), '"password": "[REDACTED]"'),
        (re.compile(r'"token"\s*:\s*"[^"]*"'), '"token": "[REDACTED]"'),
        (re.compile(r'"api_?key"\s*:\s*"[^"]*"', re.IGNORECASE), '"apiKey": "[REDACTED]"'),
        (re.compile(r'"secret"\s*:\s*"[^"]*"'), '"secret": "[REDACTED]"'),
        (re.compile(r'"authorization"\s*:\s*"[^"]*"', re.IGNORECASE), '"authorization": "[REDACTED]"'),
        (re.compile(r'Bearer\s+[A-Za-z0-9\-._~+/]+=*', re.IGNORECASE), 'Bearer [REDACTED]'),
        (re.compile(r'(api_?key=)[^&\s]+', re.IGNORECASE), r'\1[REDACTED]'),
    ]

    # Paths to exclude from detailed logging (health checks, metrics, etc.)
    EXCLUDED_PATHS = {
        "/health",
        "/metrics",
        "/favicon.ico",
        "/robots.txt"
    }

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = getattr(request.state, "request_id", "unknown")

        skip_detailed_logging = (
            request.url.path in self.EXCLUDED_PATHS and
            not settings.LOG_HEALTH_CHECKS
        )

        start_time = time.perf_counter()

        if not skip_detailed_logging or settings.DEBUG:
            logger.info(
                "request_started",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                query_params=self._redact_sensitive_data(str(request.query_params)),
                client_host=request.client.host if request.client else None,
            )

        try:
            response = await call_next(request)
        except Exception as e:
            response_time = time.perf_counter() - start_time

            # Always log errors, even for health checks
            logger.error(
                "request_failed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                error_type=type(e).__name__,
                error_message=self._redact_sensitive_data(str(e)),
                response_time_ms=int(response_time * 1000),
                exc_info=True
            )

            # Re-raise to be handled by error handler
            raise

        response_time = time.perf_counter() - start_time
        MetricsCollector.record_http_request(
            request.method,
            self._endpoint_label(request),
            response.status_code,
            response_time,
        )

        if not skip_detailed_logging or settings.DEBUG or response.status_code >= 400:
            logger.info(
                "request_completed",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                status_code=response.status_code,
                response_time_ms=int(response_time * 1000),
            )

        return response

    @staticmethod
    def _endpoint_label(request: Request) -> str:
        # Route templates keep the label set bounded (/tools/{tool_name}, not every tool)
        route = request.scope.get("route")
        return getattr(route, "path", None) or request.url.path

    @classmethod
    def _redact_sensitive_data(cls, text: str) -> str:
        """
        Redact sensitive data from text.

        Replaces passwords, tokens, API keys, and other sensitive
        information with [REDACTED] placeholder.
        """
        for pattern, replacement in cls.SENSITIVE_PATTERNS:
            text = pattern.sub(replacement, text)
        return text


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    Catches all unhandled exceptions and formats them into
    consistent JSON error responses.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)

        except Exception as e:
            request_id = getattr(request.state, "request_id", "unknown")

            logger.error(
                "unhandled_exception",
                request_id=request_id,
                error_type=type(e).__name__,
                error_message=str(e),
                exc_info=True
            )

            return JSONResponse(
                status_code=500,
                content={
                    "error": str(e) or "Internal server error",
                    "requestId": request_id,
                }
            )
