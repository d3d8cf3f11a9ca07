"""FastAPI middleware configuration."""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from envoverlay.services import diagnostics
from envoverlay.services.diagnostics import Verbosity
from envoverlay.services.error_handler import ErrorHandler


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware for centralized error handling."""

    async def dispatch(self, request: Request, call_next):
        # Generate correlation ID for request tracking
        correlation_id = str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        try:
            response = await call_next(request)
        except Exception as exc:
            return ErrorHandler.handle_exception(exc, request)

        response.headers["X-Correlation-ID"] = correlation_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request/response logging."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()

        response = await call_next(request)

        duration = time.time() - start_time
        correlation_id = getattr(request.state, "correlation_id", "unknown")

        if diagnostics.resolve_verbosity(None) >= Verbosity.DEBUG:
            print(
                f"[REQUEST] {correlation_id} - {request.method} {request.url} - "
                f"Status: {response.status_code} - Duration: {duration:.3f}s",
                flush=True,
            )

        return response
