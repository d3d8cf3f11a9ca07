"""Comprehensive error handling service."""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from envoverlay.core.errors import EnvFileReadError, OverlayStateError
from envoverlay.services import diagnostics


def _timestamp() -> str:
    return datetime.now(timezone.utc).replace(tzinfo=None).isoformat() + "Z"


class ErrorHandler:
    """Centralized error handling service."""

    @staticmethod
    def handle_exception(exc: Exception, request: Request) -> JSONResponse:
        """Handle any exception and return structured response."""
        correlation_id = getattr(request.state, "correlation_id", str(uuid.uuid4()))
        timestamp = _timestamp()

        ErrorHandler.log_error(
            exc,
            {
                "correlation_id": correlation_id,
                "method": request.method,
                "url": str(request.url),
            },
        )

        if isinstance(exc, HTTPException):
            status_code = exc.status_code
            content = {
                "detail": exc.detail,
                "error_code": f"HTTP_{exc.status_code}",
            }
        elif isinstance(exc, ValidationError):
            status_code = 400
            content = ErrorHandler.format_validation_error(exc)
        elif isinstance(exc, EnvFileReadError):
            status_code = 422
            content = {
                "detail": str(exc),
                "error_code": "ENV_FILE_UNREADABLE",
                "path": exc.path,
            }
        elif isinstance(exc, OverlayStateError):
            status_code = 503
            content = {
                "detail": str(exc),
                "error_code": "OVERLAY_POISONED",
            }
        else:
            status_code = 500
            content = {
                "detail": "An unexpected error occurred",
                "error_code": "INTERNAL_SERVER_ERROR",
            }

        content.update({"timestamp": timestamp, "correlation_id": correlation_id})
        return JSONResponse(
            status_code=status_code,
            content=content,
            headers={"X-Correlation-ID": correlation_id},
        )

    @staticmethod
    def log_error(exc: Exception, context: Dict[str, Any]) -> str:
        """Log error with context and return correlation ID."""
        correlation_id = context.get("correlation_id")
        if correlation_id is None:
            correlation_id = str(uuid.uuid4())

        diagnostics.error(f"{correlation_id} - {type(exc).__name__}: {str(exc)} - Context: {context}")

        return correlation_id

    @staticmethod
    def format_validation_error(exc: ValidationError) -> Dict[str, Any]:
        """Format Pydantic validation error into structured response."""
        field_errors: Dict[str, List[str]] = {}

        for error in exc.errors():
            field_path = ".".join(str(loc) for loc in error["loc"])
            field_errors.setdefault(field_path, []).append(error["msg"])

        return {
            "detail": "Validation error",
            "error_code": "VALIDATION_ERROR",
            "field_errors": field_errors,
        }
