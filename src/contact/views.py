"""Public contact form endpoint."""

from typing import Any

from drf_spectacular.utils import extend_schema
from rest_framework import status

from core.response import BaseAPIView, api_response
from .serializers import ContactMessageSerializer, ContactRequestSerializer
from .services import submit_contact


class ContactView(BaseAPIView):
    permission_classes: list[Any] = []

    @extend_schema(request=ContactRequestSerializer, responses={201: ContactMessageSerializer})
    def post(self, request):
        message = submit_contact(request.data)
        return api_response(ContactMessageSerializer(message).data, status=status.HTTP_201_CREATED)
