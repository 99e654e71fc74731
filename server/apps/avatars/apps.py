"""Django app configuration for avatars app."""

from typing import override

from django.apps import AppConfig


class AvatarsConfig(AppConfig):
    """Configuration for avatars app."""

    default_auto_field = 'django.db.models.BigAutoField'
    name = 'server.apps.avatars'
    verbose_name = 'Avatars'

    @override
    def ready(self) -> None:
        """Import signal handlers when app is ready."""
        from server.apps.avatars import signals  # noqa: F401
