"""Root URL configuration for the blog platform API."""
from django.conf import settings
from django.conf.urls.static import static
from django.urls import include, path
from drf_spectacular.views import SpectacularAPIView

urlpatterns = [
    path("auth/", include("authentication.urls")),
    path("", include("posts.urls")),
    path("", include("contact.urls")),
    path("schema/", SpectacularAPIView.as_view(), name="schema"),
] + static("media/", document_root=settings.MEDIA_ROOT)
