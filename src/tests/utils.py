"""Shared helpers for tests (seeding, user creation, fake Redis)."""

from __future__ import annotations

from typing import Dict
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.test import TestCase
from rest_framework.test import APIClient

from authentication.managers import UserManager
from authentication.services import issue_session
from scripts.management.commands.seed_blog import create_seed_posts, create_seed_users

User = get_user_model()

DEFAULT_PASSWORD = "StrongPass123!"


class FakeRedis:
    """Minimal Redis stub supporting the commands used by TokenService."""

    def __init__(self):
        self._store: Dict[str, str] = {}

    def setex(self, key: str, ttl_seconds: int, value: str) -> None:
        """Mimic Redis SETEX; TTL is ignored in tests, value stored in-memory."""
        self._store[key] = value

    def get(self, key: str):
        """Return stored value for key or None, matching Redis GET semantics."""
        return self._store.get(key)


class APITestCase(TestCase):
    """TestCase with Redis replaced by :class:`FakeRedis` and a clean page cache."""

    @classmethod
    def setUpClass(cls):
        """Patch Redis clients to use in-memory fake for all tests."""
        super().setUpClass()
        cls.fake_redis = FakeRedis()
        cls.patchers = [
            mock.patch("core.redis_client.get_redis_client", return_value=cls.fake_redis),
            mock.patch("authentication.services.get_redis_client", return_value=cls.fake_redis),
        ]
        for patcher in cls.patchers:
            patcher.start()

    @classmethod
    def tearDownClass(cls):
        """Stop Redis patches after all tests complete."""
        for patcher in cls.patchers:
            patcher.stop()
        super().tearDownClass()

    def setUp(self):
        """Fresh DRF APIClient and empty page cache per test."""
        cache.clear()
        self.api_client: APIClient = APIClient()


def seed_blog_basics():
    """Create the demo users and posts used by the ``seed_blog`` command."""
    users = create_seed_users()
    posts = create_seed_posts(users)
    return users, posts


def create_user(email: str, password: str = DEFAULT_PASSWORD, **extra):
    """Create a user with a bcrypt-hashed password for tests."""
    extra.setdefault("name", email.split("@", 1)[0].title())
    return User.objects.create(
        email=email,
        password_hash=UserManager.hash_password(password),
        **extra,
    )


def authenticated_client(user) -> APIClient:
    """APIClient carrying a freshly issued access token for ``user``."""
    client = APIClient()
    client.credentials(HTTP_AUTHORIZATION=f"Bearer {issue_session(user)['access']}")
    return client
