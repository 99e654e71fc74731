"""Django admin configuration for avatars app."""

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest

from server.apps.avatars.models import Avatar


@admin.register(Avatar)
class AvatarAdmin(admin.ModelAdmin[Avatar]):
    """Admin interface for Avatar model."""

    list_display = [
        'user',
        'avatar',
        'dimensions_display',
        'updated_at',
    ]

    search_fields = [
        'user__username',
        'avatar',
    ]

    readonly_fields = [
        'avatar',
        'avatar_width',
        'avatar_height',
        'updated_at',
    ]

    def dimensions_display(self, obj: Avatar) -> str:
        """Display avatar dimensions.

        Args:
            obj: Avatar instance.

        Returns:
            Dimensions like '50x50', or '-' when no avatar is set.
        """
        if not obj.avatar:
            return '-'
        return f'{obj.avatar_width}x{obj.avatar_height}'
    dimensions_display.short_description = 'Dimensions'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Avatar]:
        """Optimize queryset with select_related.

        Args:
            request: HTTP request.

        Returns:
            Optimized QuerySet.
        """
        return super().get_queryset(request).select_related('user')
