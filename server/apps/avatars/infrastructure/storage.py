"""Custom storage backend for avatar objects."""

import logging
from typing import Any, final, override

from storages.backends.s3 import S3Storage

from server.apps.avatars.exceptions import (
    StorageDeleteError,
    StorageWriteError,
    Violation,
)

logger = logging.getLogger(__name__)


@final
class AvatarStorage(S3Storage):
    """S3 storage backend for avatar objects.

    Extends django-storages S3Storage with:
    - Keyed writes that replace an existing object in one step
    - Avatar-specific error types and logging
    """

    def write(
        self,
        name: str,
        content: Any,
        *,
        overwrite: bool = True,
    ) -> str:
        """Store content under exactly ``name``.

        The object is written with a single S3 upload, so readers see
        either the previous bytes or the new bytes, never a partial
        object. On failure the previous object is left untouched.

        Args:
            name: Storage key for the object.
            content: File content (file-like object).
            overwrite: Replace an existing object at ``name``.

        Returns:
            Storage key that was written.

        Raises:
            StorageWriteError: If the key is taken and ``overwrite`` is
                False, or if the S3 upload fails.
        """
        if not overwrite and self.exists(name):
            logger.warning('Refusing to overwrite avatar object: %s', name)
            raise StorageWriteError([
                Violation(
                    'AVATAR_FILE_EXISTS',
                    f'Avatar object already exists: {name}',
                ),
            ])

        try:
            logger.info('Writing avatar object to storage: %s', name)
            # file_overwrite keeps the key exactly as given
            saved_name = self.save(name, content)
        except Exception as exc:
            logger.exception('Failed to write avatar object: %s', name)
            raise StorageWriteError([
                Violation(
                    'AVATAR_GENERAL_UPLOAD_ERROR',
                    f'Could not store avatar: {exc}',
                ),
            ]) from exc

        logger.info('Successfully wrote avatar object: %s', saved_name)
        return saved_name

    @override
    def delete(self, name: str) -> None:
        """Delete avatar object from S3 with logging.

        Args:
            name: Storage key of the object to delete.

        Raises:
            StorageDeleteError: If S3 delete fails.
        """
        try:
            logger.info('Deleting avatar object from storage: %s', name)
            super().delete(name)
        except Exception as exc:
            logger.exception('Failed to delete avatar object: %s', name)
            raise StorageDeleteError(name) from exc
        logger.info('Successfully deleted avatar object: %s', name)

    def list_names(self) -> list[str]:
        """List every object key at the bucket root.

        Returns:
            Object keys, sorted.
        """
        _, files = self.listdir('')
        return sorted(files)
