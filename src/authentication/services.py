"""Session issuance: JWT tokens, blocklist checks and credential flows.

Sign-up, sign-in, refresh and sign-out share one contract: they return plain
values on success and raise taxonomy errors from ``core.exceptions`` on
failure. Views never build error responses themselves.
"""

import logging
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Tuple

import jwt
from django.conf import settings
from django.db import IntegrityError, transaction
from rest_framework.exceptions import AuthenticationFailed

from core.exceptions import AuthenticationError, BlocklistUnavailable, ConflictError
from core.redis_client import get_redis_client

from .models import User

logger = logging.getLogger(__name__)


class TokenService:
    """Handle JWT issuance, decoding, and blocklist operations."""

    ALGORITHM = "HS256"
    BLOCKLIST_PREFIX = "blocklist:token:"

    @classmethod
    def access_ttl(cls) -> timedelta:
        return timedelta(minutes=settings.JWT_ACCESS_TTL_MINUTES)

    @classmethod
    def refresh_ttl(cls) -> timedelta:
        return timedelta(hours=settings.JWT_REFRESH_TTL_HOURS)

    @classmethod
    def generate_tokens(cls, user) -> Tuple[str, str]:
        """Generate signed access and refresh tokens for the given user."""

        now = datetime.now(timezone.utc)
        access_payload = cls._build_payload(user, "access", now, cls.access_ttl())
        refresh_payload = cls._build_payload(user, "refresh", now, cls.refresh_ttl())

        access_token = jwt.encode(access_payload, settings.SECRET_KEY, algorithm=cls.ALGORITHM)
        refresh_token = jwt.encode(refresh_payload, settings.SECRET_KEY, algorithm=cls.ALGORITHM)
        return access_token, refresh_token

    @classmethod
    def _build_payload(cls, user, token_type: str, issued_at: datetime, ttl: timedelta) -> dict[str, Any]:
        exp = issued_at + ttl
        return {
            "sub": str(user.id),
            "jti": str(uuid.uuid4()),
            "exp": int(exp.timestamp()),
            "iat": int(issued_at.timestamp()),
            "role": user.role,
            "type": token_type,
        }

    @classmethod
    def decode_token(cls, token: str, expected_type: str | None = None) -> dict[str, Any]:
        """Decode and validate a JWT; optionally enforce token type."""

        try:
            payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[cls.ALGORITHM])
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationFailed("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationFailed("Invalid token") from exc

        if expected_type and payload.get("type") != expected_type:
            raise AuthenticationFailed("Invalid token type")

        return payload

    @classmethod
    def block_token(cls, jti: str, exp: int) -> None:
        """Add token jti to blocklist until its expiration timestamp."""

        client = get_redis_client()
        ttl_seconds = max(1, exp - int(time.time()))
        try:
            client.setex(f"{cls.BLOCKLIST_PREFIX}{jti}", ttl_seconds, "1")
        except Exception as exc:  # pragma: no cover - network failure
            raise BlocklistUnavailable("Redis unavailable while blocklisting") from exc

    @classmethod
    def is_token_blocked(cls, jti: str) -> bool:
        """Check if a token jti is present in the blocklist."""

        client = get_redis_client()
        try:
            return client.get(f"{cls.BLOCKLIST_PREFIX}{jti}") is not None
        except Exception as exc:  # pragma: no cover - network failure
            raise BlocklistUnavailable("Redis unavailable while checking blocklist") from exc


def issue_session(user: User) -> dict[str, Any]:
    """Token pair plus lifetime metadata for a freshly authenticated user."""
    access, refresh = TokenService.generate_tokens(user)
    return {
        "access": access,
        "refresh": refresh,
        "expires_in": int(TokenService.access_ttl().total_seconds()),
    }


def sign_up(data: dict[str, Any]) -> User:
    """Create an author account from validated sign-up data."""
    if User.objects.email_taken(data["email"]):
        raise ConflictError("Email already in use.")
    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=data["email"],
                password=data["password"],
                name=data["name"],
            )
    except IntegrityError as exc:
        raise ConflictError("Email already in use.") from exc
    logger.info("Registered user %s", user.id)
    return user


def sign_in(email: str, password: str) -> User:
    """Return the active user matching the credentials."""
    user = User.objects.get_by_email(email)
    if user is None or not user.check_password(password):
        logger.info("Failed sign-in for %s", email)
        raise AuthenticationError("Invalid credentials.")
    if not user.is_active:
        raise AuthenticationError("User is inactive.")
    return user


def refresh_session(refresh_token: str | None) -> User:
    """Resolve a refresh token to its (still active) user."""
    if not refresh_token:
        raise AuthenticationError("Refresh token required.")
    try:
        payload = TokenService.decode_token(refresh_token, expected_type="refresh")
    except AuthenticationFailed as exc:
        raise AuthenticationError(exc.detail) from exc

    jti = payload.get("jti")
    if not jti or TokenService.is_token_blocked(jti):
        raise AuthenticationError("Invalid or revoked refresh token.")

    user = _get_active_user(payload.get("sub"))
    if user is None:
        raise AuthenticationError("User not found or inactive.")

    # A refresh token is single use.
    TokenService.block_token(jti, payload["exp"])
    return user


def sign_out(access_token: str | None, refresh_token: str | None = None) -> None:
    """Blocklist the access token and, when supplied, its refresh token."""
    if not access_token:
        raise AuthenticationError("Missing token.")
    try:
        payload = TokenService.decode_token(access_token, expected_type="access")
    except AuthenticationFailed as exc:
        raise AuthenticationError(exc.detail) from exc
    TokenService.block_token(payload["jti"], payload["exp"])

    if refresh_token:
        try:
            refresh_payload = TokenService.decode_token(refresh_token, expected_type="refresh")
        except AuthenticationFailed:
            logger.info("Ignoring invalid refresh token on sign-out")
        else:
            TokenService.block_token(refresh_payload["jti"], refresh_payload["exp"])
    logger.info("Signed out user %s", payload.get("sub"))


def _get_active_user(user_id) -> User | None:
    """Retrieve an active user by id, or None if missing/inactive."""
    if not user_id:
        return None
    user = User.objects.filter(id=user_id).first()
    if user is None or not user.is_active:
        return None
    return user


__all__ = [
    "TokenService",
    "issue_session",
    "refresh_session",
    "sign_in",
    "sign_out",
    "sign_up",
]
