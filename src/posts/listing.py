"""Sort and status filters requested by post list views."""

from django.db.models import Q, QuerySet
from django.db.models.functions import Lower

DEFAULT_SORT = "latest"
DEFAULT_STATUS = "all"
ALL_CATEGORIES = "all"

SORT_ORDERINGS = {
    "latest": ("-created_at", "-id"),
    "oldest": ("created_at", "id"),
    "title": (Lower("title"), "title", "created_at"),
}

STATUS_FILTERS = {
    "all": Q(),
    "published": Q(published=True),
    "draft": Q(published=False),
}


def normalize_sort(value: str | None) -> str:
    return value if value in SORT_ORDERINGS else DEFAULT_SORT


def normalize_status(value: str | None) -> str:
    return value if value in STATUS_FILTERS else DEFAULT_STATUS


def sort_posts(queryset: QuerySet, sort: str | None) -> QuerySet:
    return queryset.order_by(*SORT_ORDERINGS[normalize_sort(sort)])


def filter_posts(queryset: QuerySet, status: str | None) -> QuerySet:
    return queryset.filter(STATUS_FILTERS[normalize_status(status)])


def filter_category(queryset: QuerySet, category: str | None) -> QuerySet:
    category = (category or "").strip()
    if not category or category.lower() == ALL_CATEGORIES:
        return queryset
    return queryset.filter(category__iexact=category)


def apply_view(queryset: QuerySet, sort: str | None = None, status: str | None = None) -> QuerySet:
    """Filter by publication status, then order; unknown options fall back to defaults."""
    return sort_posts(filter_posts(queryset, status), sort)


__all__ = [
    "ALL_CATEGORIES",
    "DEFAULT_SORT",
    "DEFAULT_STATUS",
    "apply_view",
    "filter_category",
    "filter_posts",
    "normalize_sort",
    "normalize_status",
    "sort_posts",
]
