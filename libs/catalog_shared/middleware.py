# libs/catalog_shared/middleware.py
"""
ASGI middleware components for FastAPI applications.

Correlation ID propagation and request metrics.
"""

import time
import uuid
from typing import Callable, List, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from .logging import get_logger
from .metrics import Metrics


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """
    Middleware to generate and propagate correlation IDs.
    Ensures all requests have a correlation ID for tracing.
    """

    def __init__(self, app: ASGIApp, header_name: str = "X-Correlation-ID"):
        """
        Initialize the middleware.

        Args:
            app: The ASGI application
            header_name: The header name for the correlation ID
        """
        super().__init__(app)
        self.header_name = header_name
        self.logger = get_logger("correlation")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        correlation_id = request.headers.get(self.header_name)

        if not correlation_id:
            correlation_id = str(uuid.uuid4())
            self.logger.debug(
                f"Generated new correlation ID: {correlation_id}",
                extra={"correlation_id": correlation_id},
            )

        # Route handlers read it back from request.state
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers[self.header_name] = correlation_id

        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Middleware to collect and emit request metrics.
    Tracks request counts, durations, and status codes.
    """

    def __init__(self, app: ASGIApp, exclude_paths: Optional[List[str]] = None):
        """
        Initialize the middleware.

        Args:
            app: The ASGI application
            exclude_paths: Optional list of paths to exclude from metrics
        """
        super().__init__(app)
        self.exclude_paths = exclude_paths or []
        self.logger = get_logger("metrics")

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if any(request.url.path.startswith(path) for path in self.exclude_paths):
            return await call_next(request)

        start_time = time.time()
        path = request.url.path
        method = request.method
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            self.logger.exception(
                f"Exception in request: {method} {path}",
                extra={"method": method, "path": path, "exception": str(e)},
            )
            raise
        finally:
            duration_ms = (time.time() - start_time) * 1000

            Metrics.counter(
                "http_requests_total",
                {"method": method, "path": path, "status": str(status_code)},
            )
            Metrics.histogram(
                "http_request_duration_ms",
                duration_ms,
                {"method": method, "path": path},
            )

        return response
