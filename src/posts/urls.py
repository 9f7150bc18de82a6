"""Routing for post endpoints and image uploads."""

from django.urls import include, path
from rest_framework.routers import DefaultRouter

from .views import ImageUploadView, PostViewSet

router = DefaultRouter()
router.register(r"posts", PostViewSet, basename="post")

urlpatterns = [
    path("uploads/", ImageUploadView.as_view(), name="post-image-upload"),
    path("", include(router.urls)),
]
