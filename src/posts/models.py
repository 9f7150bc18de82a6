"""Blog posts and their (not yet exposed) comment threads."""

import uuid

from django.conf import settings
from django.core.validators import RegexValidator
from django.db import models

SLUG_PATTERN = r"^[a-z0-9-]+$"


class Post(models.Model):
    """Blog post owned by its author; only the author may change or delete it."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=100)
    slug = models.CharField(
        max_length=255,
        unique=True,
        validators=[RegexValidator(SLUG_PATTERN)],
    )
    content = models.TextField()
    excerpt = models.CharField(max_length=300, blank=True)
    category = models.CharField(max_length=100, blank=True)
    tags = models.JSONField(default=list, blank=True)
    featured_image = models.URLField(blank=True)
    published = models.BooleanField(default=False)
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="posts")
    # Field order matters: created_at is stamped before updated_at on insert.
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["published", "-created_at"], name="post_published_created_idx")]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return self.title


class Comment(models.Model):
    """Reader comment awaiting moderation; replies point at ``parent``."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name="comments")
    author = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="comments")
    parent = models.ForeignKey("self", null=True, blank=True, on_delete=models.CASCADE, related_name="replies")
    content = models.TextField()
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["created_at"]

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"Comment on {self.post_id}"


__all__ = ["Comment", "Post", "SLUG_PATTERN"]
