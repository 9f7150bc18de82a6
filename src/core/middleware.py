"""Middleware that resolves the bearer token into the request's session user."""

import logging
from typing import Optional

from django.contrib.auth.models import AnonymousUser
from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin
from rest_framework import status
from rest_framework.exceptions import AuthenticationFailed

from authentication.models import User
from authentication.services import TokenService
from core.exceptions import AUTHENTICATION_MESSAGE, BlocklistUnavailable

logger = logging.getLogger(__name__)


class JWTAuthMiddleware(MiddlewareMixin):
    """Decode the access JWT, check the blocklist and attach ``request.user``.

    Requests without an ``Authorization: Bearer`` header continue as
    anonymous; public endpoints serve them and mutating endpoints reject them
    with 401. A header that is present but invalid is rejected here.
    """

    def process_request(self, request):  # type: ignore[override]
        auth_header = request.META.get("HTTP_AUTHORIZATION", "")
        if not auth_header.startswith("Bearer "):
            request.user = AnonymousUser()
            return None

        token = auth_header.split(" ", 1)[1]
        try:
            user = self._resolve_user(token)
        except AuthenticationFailed as exc:
            logger.info("Rejected bearer token: %s", exc.detail)
            return _unauthorized()
        except BlocklistUnavailable:
            logger.error("Token blocklist unavailable while authenticating request")
            return _service_unavailable()

        if user is None:
            return _unauthorized()

        request.user = user
        return None

    @staticmethod
    def _resolve_user(token: str) -> Optional[User]:
        payload = TokenService.decode_token(token, expected_type="access")
        jti = payload.get("jti")
        if not jti or TokenService.is_token_blocked(jti):
            return None

        user_id = payload.get("sub")
        if not user_id:
            return None
        user = User.objects.filter(id=user_id).first()
        if user is None or not user.is_active:
            return None
        return user


def _unauthorized() -> JsonResponse:
    return JsonResponse(
        {"data": None, "errors": [AUTHENTICATION_MESSAGE]},
        status=status.HTTP_401_UNAUTHORIZED,
    )


def _service_unavailable() -> JsonResponse:
    return JsonResponse(
        {"data": None, "errors": ["Authentication service unavailable (blocklist)."]},
        status=status.HTTP_503_SERVICE_UNAVAILABLE,
    )


__all__ = ["JWTAuthMiddleware"]
