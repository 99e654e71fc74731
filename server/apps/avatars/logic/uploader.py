"""Avatar upload driver.

Runs one upload as a sequence of steps, each with a compensating
action on failure::

    validate -> before-move hook -> move -> stale cleanup -> done

Rejected, vetoed and failed writes leave the avatar storage exactly as
it was. Only the stale-avatar cleanup after a successful move may fail
without failing the upload; that failure is logged.

Concurrency: calls are synchronous and request scoped. Two concurrent
uploads for the same entity write the same physical key. S3 replaces
the object atomically, so bytes are never mixed, but which upload's
metadata ends up on the row is decided by whichever caller commits
last. This race is accepted for human-driven avatar changes.
"""

import logging
from typing import TYPE_CHECKING, Any

from django.core.files.uploadedfile import UploadedFile

from server.apps.avatars.conf import AvatarSettings
from server.apps.avatars.exceptions import (
    HookVetoedError,
    StorageDeleteError,
    StorageWriteError,
    UploadSkipped,
    UploadState,
    ValidationFailedError,
)
from server.apps.avatars.hooks import (
    avatar_delete_before,
    avatar_move_file_before,
    dispatch,
)
from server.apps.avatars.infrastructure.naming import (
    logical_filename,
    physical_filename,
)
from server.apps.avatars.logic.validation import AvatarValidator
from server.apps.avatars.models import AvatarData, AvatarRow

if TYPE_CHECKING:
    from server.apps.avatars.infrastructure.storage import AvatarStorage

logger = logging.getLogger(__name__)


class AvatarUploader:
    """Moves uploaded avatars into storage and removes old ones.

    Collaborators are passed in explicitly; see
    ``logic.avatar_operations.get_avatar_uploader`` for the wiring
    used by the application.
    """

    def __init__(
        self,
        avatar_settings: AvatarSettings,
        storage: 'AvatarStorage',
        validator: AvatarValidator | None = None,
    ) -> None:
        """Initialize AvatarUploader.

        Args:
            avatar_settings: Limits, salt and hook timeout.
            storage: Avatar storage backend.
            validator: Upload checks, built from settings if omitted.
        """
        self.avatar_settings = avatar_settings
        self.storage = storage
        self.validator = validator or AvatarValidator(avatar_settings)

    def upload(
        self,
        row: AvatarRow,
        upload_file: UploadedFile | None,
    ) -> AvatarData | None:
        """Store a submitted avatar for the entity in ``row``.

        The row itself is never written; the caller persists the
        returned fields and must not do so when this raises.

        Args:
            row: Current avatar fields of the owning entity.
            upload_file: File from the request, if any.

        Returns:
            Fields to persist on the row, or None when uploads are
            disabled or no file was submitted.

        Raises:
            ValidationFailedError: If the file breaks a limit.
            HookVetoedError: If a before-move observer vetoed.
            StorageWriteError: If storing the file failed.
        """
        self._transition(row, UploadState.VALIDATING)
        try:
            file_spec = self.validator.validate(upload_file)
        except UploadSkipped as skipped:
            logger.debug('Avatar upload skipped for %d: %s', row.id, skipped)
            return None
        except ValidationFailedError:
            self._transition(row, UploadState.REJECTED)
            raise
        file_spec.clean_filename(self.avatar_settings.salt, row.id)

        self._transition(row, UploadState.AWAITING_HOOK)
        hook_errors = dispatch(
            avatar_move_file_before,
            type(self),
            timeout=self.avatar_settings.hook_timeout,
            filedata=file_spec.as_filedata(),
            file=file_spec,
            prefix=self.avatar_settings.prefix,
            row=row,
        )
        if hook_errors:
            self._transition(row, UploadState.VETOED)
            file_spec.remove()
            raise HookVetoedError(hook_errors)

        self._transition(row, UploadState.MOVING)
        file_spec.move_file(self.storage, overwrite=True)
        if not file_spec.moved:
            self._transition(row, UploadState.WRITE_FAILED)
            file_spec.remove()
            raise StorageWriteError(file_spec.errors)
        self._transition(row, UploadState.MOVED)

        if row.extension and row.extension != file_spec.extension:
            self._transition(row, UploadState.STALE_CLEANUP_ATTEMPTED)
            if not self.delete(row):
                logger.warning(
                    'Stale avatar of %d not deleted: %s',
                    row.id,
                    self.physical_name(row),
                )

        self._transition(row, UploadState.DONE)
        return AvatarData(
            avatar=logical_filename(row.id, file_spec.extension),
            avatar_width=file_spec.width,
            avatar_height=file_spec.height,
        )

    def delete(self, row: AvatarRow) -> bool:
        """Delete the stored avatar object of ``row``.

        Never raises: the next step (usually a re-upload) has to go on
        regardless of whether the old object could be removed.

        Args:
            row: Avatar fields of the owning entity.

        Returns:
            True if an object was deleted, False otherwise.
        """
        if not row.extension:
            return False

        filename = self.physical_name(row)
        hook_errors = dispatch(
            avatar_delete_before,
            type(self),
            timeout=self.avatar_settings.hook_timeout,
            prefix=self.avatar_settings.prefix,
            row=row,
        )
        if hook_errors:
            logger.info('Deletion of avatar %s vetoed', filename)
            return False

        try:
            if not self.storage.exists(filename):
                logger.warning(
                    'Avatar not found in storage (already deleted?): %s',
                    filename,
                )
                return False
            self.storage.delete(filename)
        except StorageDeleteError:
            # Already logged by the storage backend
            return False
        except Exception:
            logger.exception('Failed to check avatar object: %s', filename)
            return False
        return True

    def get_data(self, row: AvatarRow) -> dict[str, Any] | None:
        """Display data for the avatar of ``row``.

        Args:
            row: Avatar fields of the owning entity.

        Returns:
            Dict with ``src``, ``width`` and ``height``, or None when
            the entity has no uploaded avatar.
        """
        if not row.avatar:
            return None
        return {
            'src': self.storage.url(self.physical_name(row)),
            'width': row.avatar_width,
            'height': row.avatar_height,
        }

    def physical_name(self, row: AvatarRow) -> str:
        """Storage key of the avatar currently recorded on ``row``.

        Args:
            row: Avatar fields of the owning entity.

        Returns:
            Physical filename for the row's current extension.
        """
        return physical_filename(
            self.avatar_settings.salt,
            row.id,
            row.extension,
        )

    def _transition(self, row: AvatarRow, state: UploadState) -> None:
        logger.debug('Avatar upload for %d: %s', row.id, state.value)
