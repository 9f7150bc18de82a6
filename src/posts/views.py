"""Post endpoints. Each action delegates to ``posts.services``."""

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import permissions, status
from rest_framework.decorators import action
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response

from core.exceptions import ValidationError
from core.response import BaseAPIView, BaseViewSet, api_response, pagination_payload
from core.revalidation import cached_page
from core.validation import parse_payload
from . import services
from .rendering import sanitize_html
from .serializers import PostDetailSerializer, PostInputSerializer, PostSerializer, PreviewInputSerializer

UUID_PATTERN = r"[0-9a-fA-F-]{36}"


def _positive_int(raw, default: int, name: str) -> int:
    if raw in (None, ""):
        return default
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a positive integer.") from None


def _is_anonymous(request) -> bool:
    return not getattr(request.user, "is_authenticated", False)


class PostViewSet(BaseViewSet):
    """``/posts/`` collection, ``/posts/<id>/`` records and slug lookup."""

    permission_classes = [permissions.IsAuthenticatedOrReadOnly]
    lookup_value_regex = UUID_PATTERN

    @extend_schema(
        parameters=[
            OpenApiParameter("page", int),
            OpenApiParameter("limit", int),
            OpenApiParameter("search", str),
            OpenApiParameter("sort", str, enum=["latest", "oldest", "title"]),
            OpenApiParameter("status", str, enum=["all", "published", "draft"]),
            OpenApiParameter("category", str, description="Exact category name; 'all' disables the filter."),
            OpenApiParameter("mine", bool),
        ],
        responses=PostSerializer(many=True),
    )
    def list(self, request):
        params = request.query_params
        page = _positive_int(params.get("page"), 1, "Page")
        limit = _positive_int(params.get("limit"), services.DEFAULT_LIMIT, "Limit")
        mine = params.get("mine", "").lower() in ("1", "true", "yes")

        def build():
            result = services.list_posts(
                page=page,
                limit=limit,
                search=params.get("search", ""),
                sort=params.get("sort"),
                status=params.get("status"),
                category=params.get("category"),
                user=request.user,
                mine=mine,
            )
            return {
                "posts": PostSerializer(result.items, many=True, context={"request": request}).data,
                "pagination": pagination_payload(result),
            }

        if _is_anonymous(request) and not mine:
            payload = cached_page(services.LISTING_PATH, params.urlencode(), build)
        else:
            payload = build()
        return api_response(payload)

    @extend_schema(request=PostInputSerializer, responses={201: PostDetailSerializer})
    def create(self, request):
        post = services.create_post(request.user, request.data)
        return api_response(self._detail(post), status=status.HTTP_201_CREATED)

    @extend_schema(responses=PostDetailSerializer)
    def retrieve(self, request, pk=None):
        post = services.get_post(pk, user=request.user)
        return api_response(self._detail(post))

    @extend_schema(request=PostInputSerializer, responses=PostDetailSerializer)
    def update(self, request, pk=None):
        post = services.update_post(request.user, pk, request.data)
        return api_response(self._detail(post))

    @extend_schema(request=PostInputSerializer, responses=PostDetailSerializer)
    def partial_update(self, request, pk=None):
        return self.update(request, pk=pk)

    @extend_schema(responses={204: None})
    def destroy(self, request, pk=None):
        services.delete_post(request.user, pk)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(responses=PostDetailSerializer)
    @action(detail=False, methods=["get"], url_path=r"slug/(?P<slug>[a-z0-9-]+)")
    def by_slug(self, request, slug=None):
        """Public blog page for a post."""
        if _is_anonymous(request):
            payload = cached_page(
                services.detail_path(slug),
                "",
                lambda: self._detail(services.get_post_by_slug(slug)),
            )
        else:
            payload = self._detail(services.get_post_by_slug(slug, user=request.user))
        return api_response(payload)

    @extend_schema(request=PreviewInputSerializer)
    @action(detail=False, methods=["post"])
    def preview(self, request):
        """Sanitized HTML for an unsaved draft body."""
        data = parse_payload(PreviewInputSerializer, request.data)
        return api_response({"html": sanitize_html(data["content"])})

    def _detail(self, post):
        return PostDetailSerializer(post, context={"request": self.request}).data


class ImageUploadView(BaseAPIView):
    """Stores an image for embedding in a post body."""

    permission_classes = [permissions.IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    @extend_schema(
        request={"multipart/form-data": {"type": "object", "properties": {"image": {"type": "string", "format": "binary"}}}},
    )
    def post(self, request):
        upload = request.FILES.get("image")
        if upload is None:
            raise ValidationError("An image file is required.")
        url = services.store_image(upload)
        return api_response({"url": url}, status=status.HTTP_201_CREATED)


__all__ = ["ImageUploadView", "PostViewSet"]
