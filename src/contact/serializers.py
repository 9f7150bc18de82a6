from rest_framework import serializers

from core.validation import not_blank
from .models import ContactMessage


def _text_field(label: str, max_length: int | None = None, **kwargs) -> serializers.CharField:
    messages = {"required": f"{label} is required.", "blank": f"{label} is required."}
    if max_length is not None:
        messages["max_length"] = f"{label} must be {max_length} characters or fewer."
    return serializers.CharField(max_length=max_length, error_messages=messages, **kwargs)


class ContactRequestSerializer(serializers.Serializer):
    """Public contact form submission."""

    name = _text_field("Name", 100)
    email = serializers.EmailField(
        error_messages={
            "required": "Email is required.",
            "blank": "Email is required.",
            "invalid": "Enter a valid email address.",
        }
    )
    subject = _text_field("Subject", 200)
    message = _text_field(
        "Message",
        5000,
        trim_whitespace=False,
        validators=[not_blank("Message is required.")],
    )


class ContactMessageSerializer(serializers.ModelSerializer):
    class Meta:
        model = ContactMessage
        fields = ["id", "name", "email", "subject", "message", "status", "created_at"]
        read_only_fields = fields


__all__ = ["ContactMessageSerializer", "ContactRequestSerializer"]
