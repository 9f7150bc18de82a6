"""Authentication bridge between the JWT middleware and DRF.

``JWTAuthMiddleware`` validates the bearer token and attaches the user to the
Django request. This authenticator surfaces that user to DRF so views and
service calls receive the session user explicitly as ``request.user``.
"""

from typing import Any, Optional, Tuple

from rest_framework.authentication import BaseAuthentication


class MiddlewareUserAuthentication(BaseAuthentication):
    """Expose ``request._request.user`` (set by middleware) to DRF."""

    def authenticate(self, request) -> Optional[Tuple[Any, None]]:
        django_request = getattr(request, "_request", None)
        if django_request is None:
            return None

        user = getattr(django_request, "user", None)
        if user is None or not getattr(user, "is_authenticated", False):
            return None

        return user, None

    def authenticate_header(self, request) -> str:
        # Makes DRF answer NotAuthenticated with 401 instead of 403.
        return "Bearer"


__all__ = ["MiddlewareUserAuthentication"]
