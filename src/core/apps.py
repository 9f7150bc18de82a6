"""App configuration for the core project utilities."""

from django.apps import AppConfig


class CoreConfig(AppConfig):
    """Shared settings, envelopes, validation, error handling and page cache."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "core"
