"""
Service-layer error taxonomy and the DRF exception handler that maps it to HTTP.

Services raise these exceptions; views never build error responses by hand.
Anything that is not a ServiceError (database failures, bugs) is logged with
the request context and surfaced as a 500.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base exception for expected, domain-level failures."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "service_error"

    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(ServiceError):
    """Raised when a referenced record does not resolve."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class InvalidOperationError(ServiceError, ValueError):
    """Raised when an operation violates a domain rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_operation"


class ServiceValidationError(ServiceError, ValueError):
    """Raised when input is structurally invalid."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"


class ConflictError(ServiceError):
    """Raised when a concurrent modification is detected."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"


def api_exception_handler(exc, context):
    """
    Custom exception handler for the API.

    DRF's own exceptions (validation, authentication, permission) keep their
    default rendering. Service errors become {"error", "code"} bodies with the
    status their class declares. Everything else is an unexpected failure.
    """
    response = exception_handler(exc, context)
    if response is not None:
        return response

    view = context.get("view")
    request = context.get("request")

    if isinstance(exc, ServiceError):
        body = {"error": exc.message, "code": exc.code}
        if exc.details:
            body["details"] = exc.details
        return Response(body, status=exc.status_code)

    logger.exception(
        f"Unexpected error in {view.__class__.__name__ if view else 'unknown view'}",
        extra={
            "action": getattr(view, "action", None),
            "view_kwargs": getattr(view, "kwargs", None),
            "path": getattr(request, "path", None),
            "method": getattr(request, "method", None),
            "user_id": getattr(getattr(request, "user", None), "pk", None),
        },
    )
    return Response(
        {"error": "Internal server error occurred", "code": "unexpected_error"},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )
