"""Tests for authentication flows (sign-up, login, refresh, logout, session)."""

from __future__ import annotations

import time
from unittest import mock

import jwt
from django.conf import settings
from django.db import DatabaseError

from authentication.models import User
from authentication.services import TokenService
from core.exceptions import BlocklistUnavailable
from tests.utils import APITestCase, create_user


class AuthFlowTests(APITestCase):
    """End-to-end tests covering auth endpoints."""

    @classmethod
    def setUpTestData(cls):
        """Create a default active author."""
        cls.password = "StrongPass123!"
        cls.user = create_user("user@example.com", cls.password, name="Existing User")

    def _login(self, email=None, password=None) -> dict:
        return self.api_client.post(
            "/auth/login/",
            {"email": email or self.user.email, "password": password or self.password},
            format="json",
        ).json()["data"]["session"]

    def _signup_payload(self, **overrides) -> dict:
        payload = {
            "email": "new@example.com",
            "name": "New Author",
            "password": "NewPass123!",
            "confirm_password": "NewPass123!",
            "agree_to_terms": True,
        }
        payload.update(overrides)
        return payload

    def test_signup_success(self):
        """Successful sign-up returns the profile, a session and the envelope."""
        response = self.api_client.post("/auth/signup/", self._signup_payload(), format="json")
        body = response.json()

        self.assertEqual(response.status_code, 201)
        self.assertEqual(body["errors"], [])
        self.assertEqual(body["data"]["user"]["email"], "new@example.com")
        self.assertEqual(body["data"]["user"]["role"], User.Role.AUTHOR)
        self.assertIn("access", body["data"]["session"])
        self.assertIn("refresh", body["data"]["session"])

        stored = User.objects.get(email="new@example.com")
        self.assertNotEqual(stored.password_hash, "NewPass123!")
        self.assertTrue(stored.check_password("NewPass123!"))

    def test_signup_password_mismatch(self):
        """Mismatched passwords yield 400 with the cross-field message."""
        response = self.api_client.post(
            "/auth/signup/",
            self._signup_payload(confirm_password="Mismatch123!"),
            format="json",
        )
        body = response.json()

        self.assertEqual(response.status_code, 400)
        self.assertIsNone(body["data"])
        self.assertEqual(body["errors"], ["Passwords do not match."])
        self.assertFalse(User.objects.filter(email="new@example.com").exists())

    def test_signup_short_password_reports_length_first(self):
        """Only the first violated rule is reported."""
        response = self.api_client.post(
            "/auth/signup/",
            self._signup_payload(password="abc", confirm_password="abc"),
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"], ["Password must be at least 8 characters."])

    def test_signup_requires_terms(self):
        response = self.api_client.post(
            "/auth/signup/",
            self._signup_payload(agree_to_terms=False),
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"], ["You must agree to the terms of service."])

    def test_signup_duplicate_email_409(self):
        response = self.api_client.post(
            "/auth/signup/",
            self._signup_payload(email="USER@example.com"),
            format="json",
        )
        body = response.json()

        self.assertEqual(response.status_code, 409)
        self.assertEqual(body["errors"], ["Email already in use."])

    def test_login_success_returns_tokens(self):
        """Valid credentials return access and refresh tokens."""
        response = self.api_client.post(
            "/auth/login/",
            {"email": self.user.email, "password": self.password},
            format="json",
        )
        body = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(body["data"]["user"]["id"], str(self.user.id))
        self.assertIn("access", body["data"]["session"])
        self.assertIn("refresh", body["data"]["session"])
        self.assertEqual(body["errors"], [])

    def test_login_invalid_credentials_401(self):
        """Bad password returns 401 with null data."""
        response = self.api_client.post(
            "/auth/login/",
            {"email": self.user.email, "password": "wrongpass"},
            format="json",
        )
        body = response.json()

        self.assertEqual(response.status_code, 401)
        self.assertIsNone(body["data"])
        self.assertEqual(body["errors"], ["Invalid credentials."])

    def test_login_short_password_400(self):
        """Login payloads are validated before credentials are checked."""
        response = self.api_client.post(
            "/auth/login/",
            {"email": self.user.email, "password": "abc"},
            format="json",
        )

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"], ["Password must be at least 8 characters."])

    def test_signup_password_over_72_bytes_400(self):
        """bcrypt cannot hash it, so sign-up refuses it up front."""
        for password in ("Aa1!" + "x" * 76, "Aa1!" + "é" * 40):
            with self.subTest(length=len(password)):
                response = self.api_client.post(
                    "/auth/signup/",
                    self._signup_payload(password=password, confirm_password=password),
                    format="json",
                )

                self.assertEqual(response.status_code, 400)
                self.assertEqual(response.json()["errors"], ["Password must be 72 bytes or fewer."])
        self.assertFalse(User.objects.filter(email="new@example.com").exists())

    def test_signup_multibyte_password_within_72_bytes(self):
        password = "Aa1!" + "é" * 34
        response = self.api_client.post(
            "/auth/signup/",
            self._signup_payload(password=password, confirm_password=password),
            format="json",
        )

        self.assertEqual(response.status_code, 201)
        self.assertTrue(User.objects.get(email="new@example.com").check_password(password))

    def test_login_password_over_72_bytes_401(self):
        for password in ("y" * 80, "é" * 40):
            with self.subTest(length=len(password)):
                response = self.api_client.post(
                    "/auth/login/",
                    {"email": self.user.email, "password": password},
                    format="json",
                )

                self.assertEqual(response.status_code, 401)
                self.assertEqual(response.json()["errors"], ["Invalid credentials."])

    def test_non_object_bodies_400(self):
        for path, body in (
            ("/auth/signup/", "new@example.com NewPass123!"),
            ("/auth/login/", ["user@example.com"]),
            ("/auth/refresh/", ["token"]),
        ):
            with self.subTest(path=path):
                response = self.api_client.post(path, body, format="json")
                payload = response.json()

                self.assertEqual(response.status_code, 400)
                self.assertIsNone(payload["data"])
                self.assertIn("Expected a dictionary", payload["errors"][0])

    def test_login_inactive_user_401(self):
        """Inactive user cannot log in and receives 401."""
        self.user.is_active = False
        self.user.save(update_fields=["is_active"])

        response = self.api_client.post(
            "/auth/login/",
            {"email": self.user.email, "password": self.password},
            format="json",
        )
        body = response.json()

        self.assertEqual(response.status_code, 401)
        self.assertIsNone(body["data"])
        self.assertTrue(body["errors"])

    def test_refresh_with_valid_refresh_token(self):
        """Refresh endpoint issues new access/refresh tokens."""
        tokens = self._login()

        response = self.api_client.post("/auth/refresh/", {"refresh": tokens["refresh"]}, format="json")
        body = response.json()

        self.assertEqual(response.status_code, 200)
        self.assertIn("access", body["data"])
        self.assertIn("refresh", body["data"])
        self.assertNotEqual(body["data"]["access"], tokens["access"])

    def test_refresh_token_is_single_use(self):
        tokens = self._login()
        first = self.api_client.post("/auth/refresh/", {"refresh": tokens["refresh"]}, format="json")
        second = self.api_client.post("/auth/refresh/", {"refresh": tokens["refresh"]}, format="json")

        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 401)

    def test_refresh_with_access_token_rejected(self):
        """Providing an access token to refresh endpoint returns 401."""
        tokens = self._login()

        response = self.api_client.post("/auth/refresh/", {"refresh": tokens["access"]}, format="json")
        body = response.json()

        self.assertEqual(response.status_code, 401)
        self.assertIsNone(body["data"])
        self.assertTrue(body["errors"])

    def test_logout_blocklists_token(self):
        """Logout blocklists current access token causing subsequent 401."""
        tokens = self._login()
        self.api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        logout_response = self.api_client.post("/auth/logout/", {"refresh": tokens["refresh"]}, format="json")
        self.assertEqual(logout_response.status_code, 204)

        # Reusing the same token should now fail because it was blocklisted.
        self.assertEqual(self.api_client.get("/auth/session/").status_code, 401)

        self.api_client.credentials()
        refresh_response = self.api_client.post("/auth/refresh/", {"refresh": tokens["refresh"]}, format="json")
        self.assertEqual(refresh_response.status_code, 401)

    def test_logout_redis_down_returns_503(self):
        """If Redis is unavailable during logout, the API should fail-closed."""
        tokens = self._login()
        self.api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        with mock.patch.object(
                TokenService,
                "block_token",
                side_effect=BlocklistUnavailable("Redis unavailable while blocklisting"),
        ):
            response = self.api_client.post("/auth/logout/")

        body = response.json()
        self.assertEqual(response.status_code, 503)
        self.assertIsNone(body["data"])
        self.assertTrue(body["errors"])

    def test_invalid_bearer_token_rejected_by_middleware(self):
        self.api_client.credentials(HTTP_AUTHORIZATION="Bearer not-a-jwt")
        response = self.api_client.get("/posts/")

        self.assertEqual(response.status_code, 401)
        self.assertIsNone(response.json()["data"])

    def test_expired_refresh_token_returns_401(self):
        """Expired refresh tokens should be rejected with 401 Unauthorized."""
        now = int(time.time())
        payload = {
            "sub": str(self.user.id),
            "jti": "expired-jti",
            "exp": now - 60,
            "iat": now - 120,
            "role": self.user.role,
            "type": "refresh",
        }
        expired_refresh = jwt.encode(payload, settings.SECRET_KEY, algorithm=TokenService.ALGORITHM)

        response = self.api_client.post("/auth/refresh/", {"refresh": expired_refresh}, format="json")
        body = response.json()

        self.assertEqual(response.status_code, 401)
        self.assertIsNone(body["data"])
        self.assertTrue(body["errors"])

    def test_session_requires_authentication(self):
        response = self.api_client.get("/auth/session/")

        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["errors"], ["Authentication required."])

    def test_session_returns_current_user(self):
        tokens = self._login()
        self.api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        response = self.api_client.get("/auth/session/")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["data"]["email"], self.user.email)

    def test_patch_session_updates_profile(self):
        tokens = self._login()
        self.api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        response = self.api_client.patch(
            "/auth/session/",
            {"name": "Renamed", "avatar_url": "https://cdn.example.com/me.png"},
            format="json",
        )

        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.name, "Renamed")
        self.assertEqual(self.user.avatar_url, "https://cdn.example.com/me.png")

    def test_patch_session_cannot_change_email(self):
        """PATCH /auth/session/ must not allow changing email."""
        tokens = self._login()
        self.api_client.credentials(HTTP_AUTHORIZATION=f"Bearer {tokens['access']}")

        response = self.api_client.patch("/auth/session/", {"email": "new@example.com"}, format="json")
        body = response.json()

        self.assertEqual(response.status_code, 400)
        self.assertIsNone(body["data"])
        self.assertTrue(body["errors"])
        self.user.refresh_from_db()
        self.assertEqual(self.user.email, "user@example.com")

    def test_refresh_when_database_unavailable_returns_503_with_envelope(self):
        """Database errors during refresh should surface as 503 with JSON envelope."""
        tokens = self._login()

        with mock.patch(
                "authentication.services._get_active_user",
                side_effect=DatabaseError("DB down"),
        ):
            response = self.api_client.post("/auth/refresh/", {"refresh": tokens["refresh"]}, format="json")

        body = response.json()
        self.assertEqual(response.status_code, 503)
        self.assertIsNone(body["data"])
        self.assertTrue(body["errors"])
