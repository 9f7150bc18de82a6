"""Success envelopes: ``{"data": ..., "errors": []}`` on every 2xx body.

Failures never pass through here; ``core.exceptions.custom_exception_handler``
renders them with ``data`` set to null.
"""

from typing import Any

from rest_framework import status as http_status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework.viewsets import ViewSet


def api_response(data: Any, status: int = http_status.HTTP_200_OK) -> Response:
    return Response({"data": data, "errors": []}, status=status)


def pagination_payload(page) -> dict[str, int]:
    """Pagination block for a page object exposing page/limit/total/total_pages."""
    return {
        "page": page.page,
        "limit": page.limit,
        "total": page.total,
        "totalPages": page.total_pages,
    }


def _is_enveloped(payload: Any) -> bool:
    return isinstance(payload, dict) and {"data", "errors"} <= payload.keys()


class EnvelopeMixin:
    """Wraps bare 2xx payloads; 204 responses stay empty."""

    def finalize_response(self, request, response, *args, **kwargs):  # type: ignore[override]
        succeeded = response.status_code is not None and response.status_code < 400
        if succeeded and response.status_code != http_status.HTTP_204_NO_CONTENT:
            if getattr(response, "data", None) is not None and not _is_enveloped(response.data):
                response.data = {"data": response.data, "errors": []}
        return super().finalize_response(request, response, *args, **kwargs)  # type: ignore[attr-defined]


class BaseAPIView(EnvelopeMixin, APIView):
    pass


class BaseViewSet(EnvelopeMixin, ViewSet):
    """Routes actions to service functions instead of a model queryset."""


__all__ = ["BaseAPIView", "BaseViewSet", "EnvelopeMixin", "api_response", "pagination_payload"]
