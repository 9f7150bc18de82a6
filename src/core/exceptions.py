"""Error taxonomy and the exception handler that enforces the API envelope."""

import logging
from typing import Any, Iterable

from django.conf import settings
from django.db import DatabaseError, IntegrityError
from rest_framework import exceptions as drf_exceptions
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

AUTHENTICATION_MESSAGE = (
    "Authentication credentials were not provided or are invalid, token revoked, or user is inactive."
)
GENERIC_MESSAGE = "An unexpected error occurred. Please try again later."


class BlogError(drf_exceptions.APIException):
    """Base class for every failure surfaced to API callers."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = GENERIC_MESSAGE
    default_code = "error"


class ValidationError(BlogError):
    """Client-correctable input; ``detail`` is the first violated rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid input."
    default_code = "invalid"

    def __init__(self, detail=None, code=None, errors: Iterable[Any] = ()):
        super().__init__(detail, code)
        # Ordered (field, message) pairs; only the first is rendered.
        self.errors = list(errors)


class AuthenticationError(BlogError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication required."
    default_code = "not_authenticated"


class AuthorizationError(BlogError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You do not have permission to perform this action on this resource."
    default_code = "permission_denied"


class NotFoundError(BlogError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found."
    default_code = "not_found"


class ConflictError(BlogError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The resource conflicts with an existing record."
    default_code = "conflict"


class UnexpectedError(BlogError):
    pass


class BlocklistUnavailable(Exception):
    """Raised when the token blocklist cannot be reached (fail-closed)."""


def _first_message(payload: Any) -> Any:
    """Pick the first message out of DRF's nested error structures."""

    if isinstance(payload, dict):
        if "detail" in payload:
            return _first_message(payload["detail"])
        for value in payload.values():
            return _first_message(value)
        return GENERIC_MESSAGE
    if isinstance(payload, (list, tuple)):
        return _first_message(payload[0]) if payload else GENERIC_MESSAGE
    return payload


def _envelope(message: Any, status_code: int) -> Response:
    return Response({"data": None, "errors": [message]}, status=status_code)


def custom_exception_handler(exc: Exception, context: dict[str, Any]) -> Response:
    """Map every failure onto ``{"data": null, "errors": [message]}``.

    - Taxonomy errors and DRF's own exceptions keep their status code.
    - Validation failures report only the first violated rule.
    - Unique violations that escape the services become 409.
    - Database outages become 503; anything else is logged and becomes 500
      with a generic message.
    """

    if isinstance(exc, BlocklistUnavailable):
        logger.error("Token blocklist unavailable: %s", exc)
        return _envelope("Authentication service unavailable (blocklist).", status.HTTP_503_SERVICE_UNAVAILABLE)

    if isinstance(exc, IntegrityError):
        logger.warning("Integrity error reached the API boundary: %s", exc)
        return _envelope(ConflictError.default_detail, status.HTTP_409_CONFLICT)

    if isinstance(exc, DatabaseError):
        logger.exception("Database error while handling request")
        return _envelope("Service temporarily unavailable.", status.HTTP_503_SERVICE_UNAVAILABLE)

    response = drf_exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception("Unhandled error in %s", type(view).__name__ if view else "request", exc_info=exc)
        return _envelope(GENERIC_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, (drf_exceptions.AuthenticationFailed, drf_exceptions.NotAuthenticated)):
        response.status_code = status.HTTP_401_UNAUTHORIZED

    if response.status_code == status.HTTP_401_UNAUTHORIZED and not isinstance(exc, AuthenticationError):
        if getattr(settings, "DEBUG_AUTH_ERRORS", False):
            message = _first_message(response.data)
        else:
            message = AUTHENTICATION_MESSAGE
    elif isinstance(exc, drf_exceptions.PermissionDenied) and not isinstance(exc, BlogError):
        message = AuthorizationError.default_detail
    elif isinstance(exc, UnexpectedError):
        logger.error("Unexpected error: %s", exc.detail)
        message = GENERIC_MESSAGE
    else:
        message = _first_message(response.data)

    response.data = {"data": None, "errors": [message]}
    return response


__all__ = [
    "AuthenticationError",
    "AuthorizationError",
    "BlocklistUnavailable",
    "BlogError",
    "ConflictError",
    "NotFoundError",
    "UnexpectedError",
    "ValidationError",
    "custom_exception_handler",
]
