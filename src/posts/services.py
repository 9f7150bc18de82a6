"""Post operations: the single place where posts are read and mutated.

Every function takes the session user explicitly and raises taxonomy errors
from ``core.exceptions``. Mutations revalidate the cached public pages they
affect once the database write succeeded.
"""

import logging
import math
import os
import uuid
from dataclasses import dataclass
from typing import Any, Mapping

from django.conf import settings
from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.files.storage import default_storage
from django.db import IntegrityError, transaction
from django.db.models import Q

from core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from core.revalidation import revalidate_path
from core.validation import parse_payload

from .listing import apply_view, filter_category
from .models import Post
from .permissions import can_view, is_owner
from .serializers import PostInputSerializer

logger = logging.getLogger(__name__)

LISTING_PATH = "/posts/"
DEFAULT_LIMIT = 10
MAX_LIMIT = 100
MAX_PAGE = 100_000
SLUG_CONFLICT_MESSAGE = "This slug is already in use."
IMAGE_UPLOAD_DIR = "post-images"


def detail_path(slug: str) -> str:
    return f"/posts/slug/{slug}/"


@dataclass(frozen=True)
class PostPage:
    items: list[Post]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


def _require_user(user):
    if user is None or not getattr(user, "is_authenticated", False):
        raise AuthenticationError("Authentication required.")
    return user


def _load(post_id) -> Post:
    try:
        return Post.objects.select_related("author").get(pk=post_id)
    except (Post.DoesNotExist, DjangoValidationError, ValueError) as exc:
        raise NotFoundError("Post not found.") from exc


def _load_owned(user, post_id) -> Post:
    post = _load(post_id)
    if not is_owner(user, post):
        logger.warning("User %s attempted to modify post %s owned by %s", user.pk, post.pk, post.author_id)
        raise AuthorizationError("You can only modify your own posts.")
    return post


def create_post(user, payload: Mapping[str, Any]) -> Post:
    """Validate ``payload`` and insert a post authored by ``user``."""
    _require_user(user)
    data = parse_payload(PostInputSerializer, payload)
    try:
        with transaction.atomic():
            post = Post.objects.create(author=user, **data)
    except IntegrityError as exc:
        raise ConflictError(SLUG_CONFLICT_MESSAGE) from exc

    logger.info("User %s created post %s (%s)", user.pk, post.pk, post.slug)
    revalidate_path(LISTING_PATH)
    return post


def update_post(user, post_id, payload: Mapping[str, Any]) -> Post:
    """Apply a partial update to a post owned by ``user``."""
    _require_user(user)
    post = _load_owned(user, post_id)
    data = parse_payload(PostInputSerializer, payload, partial=True)
    previous_slug = post.slug

    for field, value in data.items():
        setattr(post, field, value)
    try:
        with transaction.atomic():
            post.save(update_fields=[*data, "updated_at"])
    except IntegrityError as exc:
        raise ConflictError(SLUG_CONFLICT_MESSAGE) from exc

    logger.info("User %s updated post %s", user.pk, post.pk)
    revalidate_path(LISTING_PATH)
    revalidate_path(detail_path(previous_slug))
    if post.slug != previous_slug:
        revalidate_path(detail_path(post.slug))
    return post


def delete_post(user, post_id) -> None:
    """Hard-delete a post owned by ``user``."""
    _require_user(user)
    post = _load_owned(user, post_id)
    slug = post.slug
    post.delete()

    logger.info("User %s deleted post %s", user.pk, post_id)
    revalidate_path(LISTING_PATH)
    revalidate_path(detail_path(slug))


def get_post(post_id, user=None) -> Post:
    post = _load(post_id)
    if not can_view(user, post):
        raise NotFoundError("Post not found.")
    return post


def get_post_by_slug(slug: str, user=None) -> Post:
    post = Post.objects.select_related("author").filter(slug=slug).first()
    if post is None or not can_view(user, post):
        raise NotFoundError("Post not found.")
    return post


def list_posts(
    page: int = 1,
    limit: int = DEFAULT_LIMIT,
    search: str = "",
    sort: str | None = None,
    status: str | None = None,
    category: str | None = None,
    user=None,
    mine: bool = False,
) -> PostPage:
    """Return one page of visible posts plus the total match count.

    Anonymous callers see published posts only. Authenticated callers also
    see their own drafts; ``mine`` restricts the list to their own posts.
    ``category`` matches case-insensitively and "all" disables it.
    """
    if page < 1:
        raise ValidationError("Page must be a positive integer.")
    if page > MAX_PAGE:
        raise ValidationError(f"Page must be {MAX_PAGE} or less.")
    if limit < 1 or limit > MAX_LIMIT:
        raise ValidationError(f"Limit must be between 1 and {MAX_LIMIT}.")

    queryset = Post.objects.select_related("author")
    authenticated = user is not None and getattr(user, "is_authenticated", False)
    if mine:
        queryset = queryset.filter(author=_require_user(user))
    elif authenticated:
        queryset = queryset.filter(Q(published=True) | Q(author=user))
    else:
        queryset = queryset.filter(published=True)

    search = (search or "").strip()
    if search:
        queryset = queryset.filter(
            Q(title__icontains=search) | Q(content__icontains=search) | Q(excerpt__icontains=search)
        )

    queryset = apply_view(filter_category(queryset, category), sort=sort, status=status)
    total = queryset.count()
    offset = (page - 1) * limit
    items = list(queryset[offset:offset + limit])
    return PostPage(items=items, page=page, limit=limit, total=total)


def store_image(upload) -> str:
    """Save an uploaded image and return its public URL."""
    content_type = getattr(upload, "content_type", "") or ""
    if not content_type.startswith("image/"):
        raise ValidationError("Only image files can be uploaded.")
    if upload.size > settings.MAX_UPLOAD_SIZE:
        raise ValidationError("Image is too large.")

    extension = os.path.splitext(upload.name)[1].lower()
    name = default_storage.save(f"{IMAGE_UPLOAD_DIR}/{uuid.uuid4().hex}{extension}", upload)
    logger.info("Stored uploaded image %s", name)
    return default_storage.url(name)


__all__ = [
    "LISTING_PATH",
    "MAX_PAGE",
    "PostPage",
    "create_post",
    "delete_post",
    "detail_path",
    "get_post",
    "get_post_by_slug",
    "list_posts",
    "store_image",
    "update_post",
]
