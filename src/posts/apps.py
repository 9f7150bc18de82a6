"""App configuration for blog posts."""

from django.apps import AppConfig


class PostsConfig(AppConfig):
    """Posts, their validation schema and the authoring workflow."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "posts"
