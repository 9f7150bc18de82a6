import logging
from typing import Any

from core.validation import parse_payload
from .models import ContactMessage
from .serializers import ContactRequestSerializer

logger = logging.getLogger(__name__)


def submit_contact(payload: Any) -> ContactMessage:
    """Validate and store a public contact submission with status ``new``."""
    data = parse_payload(ContactRequestSerializer, payload)
    message = ContactMessage.objects.create(**data)
    logger.info("Stored contact message %s from %s", message.pk, message.email)
    return message


__all__ = ["submit_contact"]
