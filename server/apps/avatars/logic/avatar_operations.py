"""Business logic for changing and removing user avatars."""

import logging
from typing import TYPE_CHECKING, Any

from django.core.files.storage import storages
from django.core.files.uploadedfile import UploadedFile
from django.db import transaction

from server.apps.avatars.conf import AvatarSettings
from server.apps.avatars.logic.uploader import AvatarUploader
from server.apps.avatars.models import Avatar

if TYPE_CHECKING:
    from django.contrib.auth.models import User

logger = logging.getLogger(__name__)

_AVATAR_FIELDS = ('avatar', 'avatar_width', 'avatar_height', 'updated_at')


def get_avatar_uploader() -> AvatarUploader:
    """Build an uploader wired to the configured storage and limits.

    Returns:
        AvatarUploader instance.
    """
    return AvatarUploader(
        avatar_settings=AvatarSettings.from_settings(),
        storage=storages['avatars'],  # type: ignore[arg-type]
    )


def get_or_create_avatar(user: 'User') -> Avatar:
    """Get or create the avatar record for user (on-demand creation).

    Args:
        user: Owner of the avatar.

    Returns:
        Avatar instance for the user.
    """
    avatar, created = Avatar.objects.get_or_create(user=user)
    if created:
        logger.debug('Created avatar record for user %s', user.username)
    return avatar


def change_avatar(
    user: 'User',
    upload_file: UploadedFile | None,
    uploader: AvatarUploader | None = None,
) -> Avatar | None:
    """Upload a new avatar for user and record it.

    Storage first, then the database: the row is only updated after
    the object is in place.

    Args:
        user: Owner of the avatar.
        upload_file: Submitted image, if any.
        uploader: Upload driver, the configured one if omitted.

    Returns:
        Updated Avatar, or None when nothing was uploaded.

    Raises:
        AvatarUploadError: If the upload was rejected or failed.
    """
    uploader = uploader or get_avatar_uploader()
    avatar = get_or_create_avatar(user)

    avatar_data = uploader.upload(avatar.as_row(), upload_file)
    if avatar_data is None:
        return None

    try:
        with transaction.atomic():
            avatar.apply(avatar_data)
            avatar.save(update_fields=_AVATAR_FIELDS)
    except Exception:
        # The new object stays in storage under the deterministic key
        logger.exception(
            'Failed to record avatar for user %s: %s',
            user.username,
            avatar_data.avatar,
        )
        raise

    logger.info(
        'Avatar changed for user %s: %s (%dx%d)',
        user.username,
        avatar.avatar,
        avatar.avatar_width,
        avatar.avatar_height,
    )
    return avatar


def remove_avatar(
    user: 'User',
    uploader: AvatarUploader | None = None,
) -> bool:
    """Delete user's stored avatar and clear the record.

    The record is cleared even when the storage object could not be
    deleted; ``purge_stale_avatars`` picks up such leftovers.

    Args:
        user: Owner of the avatar.
        uploader: Upload driver, the configured one if omitted.

    Returns:
        True if a stored object was deleted.
    """
    uploader = uploader or get_avatar_uploader()
    try:
        avatar = Avatar.objects.get(user=user)
    except Avatar.DoesNotExist:
        logger.debug('No avatar record for user %s', user.username)
        return False

    deleted = uploader.delete(avatar.as_row())

    with transaction.atomic():
        avatar.clear()
        avatar.save(update_fields=_AVATAR_FIELDS)

    logger.info(
        'Avatar removed for user %s (object deleted: %s)',
        user.username,
        deleted,
    )
    return deleted


def get_avatar_data(
    avatar: Avatar,
    uploader: AvatarUploader | None = None,
) -> dict[str, Any] | None:
    """Display data for a stored avatar.

    Args:
        avatar: Avatar record.
        uploader: Upload driver, the configured one if omitted.

    Returns:
        Dict with ``src``, ``width`` and ``height``, or None.
    """
    uploader = uploader or get_avatar_uploader()
    return uploader.get_data(avatar.as_row())
