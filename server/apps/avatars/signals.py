"""Signal handlers for avatars app."""

import logging

from django.db.models.signals import post_delete
from django.dispatch import receiver

from server.apps.avatars.models import Avatar

logger = logging.getLogger(__name__)


@receiver(post_delete, sender=Avatar)
def delete_avatar_from_storage(
    sender: type[Avatar],
    instance: Avatar,
    **kwargs: object,
) -> None:
    """Delete the stored avatar object when its record is deleted.

    Covers deletions through the admin, the ORM and user cascades.

    Args:
        sender: The Avatar model class.
        instance: The Avatar instance being deleted.
        **kwargs: Additional signal arguments.
    """
    if not instance.avatar:
        return

    # Imported here to keep model loading free of storage setup
    from server.apps.avatars.logic.avatar_operations import (  # noqa: WPS433
        get_avatar_uploader,
    )

    try:
        uploader = get_avatar_uploader()
    except Exception:
        # Log error but don't raise - DB delete already succeeded
        logger.exception(
            'Avatar storage unavailable, object orphaned for user %d',
            instance.user_id,
        )
        return

    if uploader.delete(instance.as_row()):
        logger.info('Avatar deleted after record removal: %d', instance.user_id)
