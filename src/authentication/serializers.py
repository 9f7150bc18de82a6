"""Serializers for authentication flows (sign-up, login, refresh, profile).

The request serializers are the validation rules for their endpoints; views
run them through ``core.validation.parse_payload`` so only the first
violation is reported.
"""

from django.contrib.auth import get_user_model
from django.core.validators import MinLengthValidator, RegexValidator
from rest_framework import serializers

from core.validation import max_bytes
from .managers import BCRYPT_MAX_BYTES

User = get_user_model()

PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_BYTES = BCRYPT_MAX_BYTES

EMAIL_ERRORS = {
    "required": "Email is required.",
    "blank": "Email is required.",
    "null": "Email is required.",
    "invalid": "Enter a valid email address.",
}
PASSWORD_ERRORS = {
    "required": "Password is required.",
    "blank": "Password is required.",
    "null": "Password is required.",
}
TERMS_MESSAGE = "You must agree to the terms of service."


def password_field(*validators, **kwargs) -> serializers.CharField:
    return serializers.CharField(
        write_only=True,
        trim_whitespace=False,
        validators=[
            MinLengthValidator(PASSWORD_MIN_LENGTH, f"Password must be at least {PASSWORD_MIN_LENGTH} characters."),
            *validators,
        ],
        error_messages=PASSWORD_ERRORS,
        **kwargs,
    )


def name_field(**kwargs) -> serializers.CharField:
    return serializers.CharField(
        min_length=2,
        max_length=150,
        error_messages={
            "required": "Name is required.",
            "blank": "Name is required.",
            "min_length": "Name must be at least 2 characters.",
            "max_length": "Name must be 150 characters or fewer.",
        },
        **kwargs,
    )


class SignupSerializer(serializers.Serializer):
    """Account details for a new author; complexity rules apply here only."""

    email = serializers.EmailField(error_messages=EMAIL_ERRORS)
    name = name_field()
    password = password_field(
        max_bytes(PASSWORD_MAX_BYTES, f"Password must be {PASSWORD_MAX_BYTES} bytes or fewer."),
        RegexValidator(r"[A-Z]", "Password must contain at least one uppercase letter."),
        RegexValidator(r"[a-z]", "Password must contain at least one lowercase letter."),
        RegexValidator(r"[0-9]", "Password must contain at least one number."),
        RegexValidator(r"[^A-Za-z0-9]", "Password must contain at least one special character."),
    )
    confirm_password = serializers.CharField(
        write_only=True,
        trim_whitespace=False,
        error_messages={
            "required": "Please confirm your password.",
            "blank": "Please confirm your password.",
        },
    )
    agree_to_terms = serializers.BooleanField(error_messages={"required": TERMS_MESSAGE, "invalid": TERMS_MESSAGE})

    @staticmethod
    def validate_agree_to_terms(value):
        if value is not True:
            raise serializers.ValidationError(TERMS_MESSAGE)
        return value

    def validate(self, attrs):
        """Ensure provided passwords match."""
        if attrs["password"] != attrs["confirm_password"]:
            raise serializers.ValidationError({"confirm_password": "Passwords do not match."})
        return attrs


class LoginSerializer(serializers.Serializer):
    """Sign-in only checks that the password looks plausible."""

    email = serializers.EmailField(error_messages=EMAIL_ERRORS)
    password = password_field()


class TokenRequestSerializer(serializers.Serializer):
    refresh = serializers.CharField(required=False, allow_blank=True)


class ProfileUpdateSerializer(serializers.Serializer):
    """Patchable profile fields for the current session user."""

    name = name_field(required=False)
    avatar_url = serializers.CharField(
        required=False,
        allow_blank=True,
        max_length=200,
        validators=[RegexValidator(r"^https?://\S+$", "Avatar URL must start with http:// or https://.")],
        error_messages={"max_length": "Avatar URL must be 200 characters or fewer."},
    )
    bio = serializers.CharField(
        required=False,
        allow_blank=True,
        max_length=2000,
        error_messages={"max_length": "Bio must be 2000 characters or fewer."},
    )

    def validate(self, attrs):
        """Reject attempts to change email via this endpoint instead of ignoring them."""
        if "email" in self.initial_data:
            raise serializers.ValidationError("Email cannot be updated via this endpoint.")
        return attrs


class UserDetailSerializer(serializers.ModelSerializer):
    """Read-only user profile payload for responses."""

    class Meta:
        model = User
        fields = ["id", "email", "name", "avatar_url", "bio", "role", "date_joined"]
        read_only_fields = fields


class AuthorSerializer(serializers.ModelSerializer):
    """Public author card embedded in post payloads."""

    name = serializers.CharField(source="display_name", read_only=True)

    class Meta:
        model = User
        fields = ["id", "name", "avatar_url"]
        read_only_fields = fields


__all__ = [
    "AuthorSerializer",
    "LoginSerializer",
    "ProfileUpdateSerializer",
    "SignupSerializer",
    "TokenRequestSerializer",
    "UserDetailSerializer",
]
