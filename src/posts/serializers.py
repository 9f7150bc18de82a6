"""Post payloads for list cards and the detail page."""

from rest_framework import serializers

from authentication.serializers import AuthorSerializer
from core.validation import not_blank
from .models import SLUG_PATTERN, Post
from .permissions import is_owner
from .rendering import sanitize_html

DISPLAY_DATE_FORMAT = "%B %d, %Y"
TITLE_MAX_LENGTH = 100


def _required(label: str, **extra) -> dict[str, str]:
    message = f"{label} is required."
    return {"required": message, "blank": message, "null": message, **extra}


class PostInputSerializer(serializers.Serializer):
    """Create/update rules for posts; updates run it with ``partial=True``."""

    title = serializers.CharField(
        max_length=TITLE_MAX_LENGTH,
        error_messages=_required("Title", max_length=f"Title must be {TITLE_MAX_LENGTH} characters or fewer."),
    )
    content = serializers.CharField(
        trim_whitespace=False,
        validators=[not_blank("Content is required.")],
        error_messages=_required("Content"),
    )
    slug = serializers.RegexField(
        SLUG_PATTERN,
        max_length=255,
        error_messages=_required(
            "Slug",
            invalid="Slug may only contain lowercase letters, numbers and hyphens.",
            max_length="Slug must be 255 characters or fewer.",
        ),
    )
    published = serializers.BooleanField(
        default=False,
        error_messages={"invalid": "Published must be true or false."},
    )
    excerpt = serializers.CharField(
        required=False,
        allow_blank=True,
        max_length=300,
        error_messages={"max_length": "Excerpt must be 300 characters or fewer."},
    )
    category = serializers.CharField(
        required=False,
        allow_blank=True,
        max_length=100,
        error_messages={"max_length": "Category must be 100 characters or fewer."},
    )
    tags = serializers.ListField(
        child=serializers.CharField(max_length=50),
        required=False,
        error_messages={"not_a_list": "Tags must be a list of strings."},
    )


class PreviewInputSerializer(serializers.Serializer):
    content = serializers.CharField(
        required=False,
        allow_blank=True,
        trim_whitespace=False,
        default="",
        error_messages={"invalid": "Content must be a string."},
    )


class PostSerializer(serializers.ModelSerializer):
    """Card shown in post lists."""

    author = AuthorSerializer(read_only=True)
    status = serializers.SerializerMethodField()

    class Meta:
        model = Post
        fields = [
            "id",
            "title",
            "slug",
            "excerpt",
            "category",
            "tags",
            "featured_image",
            "published",
            "status",
            "author",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields

    def get_status(self, obj: Post) -> str:
        return "Published" if obj.published else "Draft"


class PostDetailSerializer(PostSerializer):
    """Full post with sanitized HTML, display dates and owner affordances.

    ``can_edit`` only drives whether edit/delete controls are shown; the
    services enforce ownership on every mutation regardless.
    """

    content_html = serializers.SerializerMethodField()
    published_on = serializers.SerializerMethodField()
    updated_on = serializers.SerializerMethodField()
    is_updated = serializers.SerializerMethodField()
    can_edit = serializers.SerializerMethodField()

    class Meta(PostSerializer.Meta):
        fields = PostSerializer.Meta.fields + [
            "content",
            "content_html",
            "published_on",
            "updated_on",
            "is_updated",
            "can_edit",
        ]
        read_only_fields = fields

    def get_content_html(self, obj: Post) -> str:
        return sanitize_html(obj.content)

    def get_published_on(self, obj: Post) -> str:
        return obj.created_at.strftime(DISPLAY_DATE_FORMAT)

    def get_updated_on(self, obj: Post) -> str:
        return obj.updated_at.strftime(DISPLAY_DATE_FORMAT)

    def get_is_updated(self, obj: Post) -> bool:
        # auto_now/auto_now_add stamp separately, so compare to the second.
        return obj.updated_at.replace(microsecond=0) != obj.created_at.replace(microsecond=0)

    def get_can_edit(self, obj: Post) -> bool:
        request = self.context.get("request")
        return is_owner(getattr(request, "user", None), obj)


__all__ = [
    "PostDetailSerializer",
    "PostInputSerializer",
    "PostSerializer",
    "PreviewInputSerializer",
    "TITLE_MAX_LENGTH",
]
