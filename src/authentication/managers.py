"""Account creation and lookup for blog users, with bcrypt password hashes."""

import uuid

import bcrypt
from django.contrib.auth.base_user import BaseUserManager

BCRYPT_MAX_BYTES = 72


class UserManager(BaseUserManager):
    use_in_migrations = True

    def get_by_email(self, email: str):
        """Case-insensitive lookup; emails are unique regardless of case."""
        return self.filter(email__iexact=email).first()

    def email_taken(self, email: str) -> bool:
        return self.filter(email__iexact=email).exists()

    def _create_account(self, email: str, password: str, **fields):
        if not email:
            raise ValueError("An email address is required.")
        user = self.model(id=uuid.uuid4(), email=self.normalize_email(email), **fields)
        user.password_hash = self.hash_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email: str, password: str | None = None, **fields):
        """Create an author account; pass ``role`` for readers or admins."""
        if password is None:
            raise ValueError("A password is required.")
        fields.setdefault("role", self.model.Role.AUTHOR)
        return self._create_account(email, password, **fields)

    def create_superuser(self, email: str, password: str, **fields):
        fields.setdefault("role", self.model.Role.ADMIN)
        fields.setdefault("is_active", True)
        if fields["role"] != self.model.Role.ADMIN:
            raise ValueError("Superuser must have role=admin.")
        return self._create_account(email, password, **fields)

    @staticmethod
    def hash_password(raw_password: str) -> str:
        """bcrypt refuses secrets over ``BCRYPT_MAX_BYTES``; sign-up caps passwords first."""
        return bcrypt.hashpw(raw_password.encode(), bcrypt.gensalt()).decode()

    @staticmethod
    def verify_password(user, raw_password: str) -> bool:
        """False for accounts without a stored hash and for secrets bcrypt cannot hash."""
        if not user.password_hash or len(raw_password.encode()) > BCRYPT_MAX_BYTES:
            return False
        return bcrypt.checkpw(raw_password.encode(), user.password_hash.encode())


__all__ = ["BCRYPT_MAX_BYTES", "UserManager"]
