"""Authentication endpoints: sign-up, login, refresh, logout and session."""

import logging
from typing import Any

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.response import Response

from core.exceptions import AuthenticationError
from core.response import BaseAPIView, api_response
from core.validation import parse_payload
from .serializers import (
    LoginSerializer,
    ProfileUpdateSerializer,
    SignupSerializer,
    TokenRequestSerializer,
    UserDetailSerializer,
)
from .services import issue_session, refresh_session, sign_in, sign_out, sign_up

logger = logging.getLogger(__name__)


def _session_payload(user) -> dict[str, Any]:
    return {"user": UserDetailSerializer(user).data, "session": issue_session(user)}


class SignupView(BaseAPIView):
    permission_classes: list[Any] = []

    @extend_schema(request=SignupSerializer)
    def post(self, request):
        """Create an author account and open a session for it."""
        data = parse_payload(SignupSerializer, request.data)
        user = sign_up(data)
        return api_response(_session_payload(user), status=status.HTTP_201_CREATED)


class LoginView(BaseAPIView):
    permission_classes: list[Any] = []

    @extend_schema(request=LoginSerializer)
    def post(self, request):
        """Authenticate with email and password."""
        data = parse_payload(LoginSerializer, request.data)
        user = sign_in(data["email"], data["password"])
        return api_response(_session_payload(user))


class RefreshView(BaseAPIView):
    permission_classes: list[Any] = []

    @extend_schema(request=TokenRequestSerializer)
    def post(self, request):
        """Exchange a refresh token for a new token pair."""
        data = parse_payload(TokenRequestSerializer, request.data)
        user = refresh_session(data.get("refresh"))
        return api_response(issue_session(user))


class LogoutView(BaseAPIView):
    permission_classes: list[Any] = []

    @extend_schema(request=TokenRequestSerializer, responses={204: None})
    def post(self, request):
        """Blocklist the bearer access token (and the refresh token if sent)."""
        data = parse_payload(TokenRequestSerializer, request.data)
        sign_out(_get_bearer_token(request), data.get("refresh"))
        # 204 responses must not include a body.
        return Response(status=status.HTTP_204_NO_CONTENT)


class SessionView(BaseAPIView):
    permission_classes: list[Any] = []

    @extend_schema(responses=UserDetailSerializer)
    def get(self, request):
        """Return the user behind the current session."""
        return api_response(UserDetailSerializer(_session_user(request)).data)

    @extend_schema(request=ProfileUpdateSerializer, responses=UserDetailSerializer)
    def patch(self, request):
        """Update display name, avatar or bio of the current user."""
        user = _session_user(request)
        data = parse_payload(ProfileUpdateSerializer, request.data, partial=True)
        for field, value in data.items():
            setattr(user, field, value)
        user.save(update_fields=[*data, "updated_at"])
        logger.info("Updated profile of user %s", user.id)
        return api_response(UserDetailSerializer(user).data)


def _session_user(request):
    if not request.user.is_authenticated:
        raise AuthenticationError("Authentication required.")
    return request.user


def _get_bearer_token(request) -> str | None:
    """Extract the Bearer token from Authorization header if present."""
    auth_header = request.META.get("HTTP_AUTHORIZATION", "")
    if auth_header.startswith("Bearer "):
        return auth_header.split(" ", 1)[1]
    return None
