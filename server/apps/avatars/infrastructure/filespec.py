"""In-progress avatar artifact."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Self

from django.core.files.uploadedfile import UploadedFile

from server.apps.avatars.exceptions import StorageWriteError, Violation
from server.apps.avatars.infrastructure.metadata import (
    detect_mime_type,
    get_file_extension,
)
from server.apps.avatars.infrastructure.naming import physical_filename

if TYPE_CHECKING:
    from server.apps.avatars.infrastructure.storage import AvatarStorage

logger = logging.getLogger(__name__)


@dataclass
class FileSpec:
    """A submitted avatar on its way into storage.

    Created when validation starts and dropped once the upload call
    returns; nothing here is persisted. ``errors`` accumulates
    validation and move failures.
    """

    upload_file: UploadedFile
    uploadname: str
    extension: str
    filesize: int
    mimetype: str
    realname: str = ''
    width: int = 0
    height: int = 0
    moved: bool = False
    errors: list[Violation] = field(default_factory=list)

    @classmethod
    def from_upload(cls, upload_file: UploadedFile) -> Self:
        """Collect basic metadata of a submitted file.

        Args:
            upload_file: File from the request.

        Returns:
            FileSpec with name, extension, size and mimetype filled in.
        """
        uploadname = Path(upload_file.name or '').name
        return cls(
            upload_file=upload_file,
            uploadname=uploadname,
            extension=get_file_extension(uploadname),
            filesize=upload_file.size or 0,
            mimetype=detect_mime_type(uploadname, upload_file.content_type),
        )

    def clean_filename(self, salt: str, entity_id: int) -> str:
        """Assign the physical storage name for the owning entity.

        Args:
            salt: Per-deployment avatar salt.
            entity_id: Id of the owning entity.

        Returns:
            The physical filename.
        """
        self.realname = physical_filename(salt, entity_id, self.extension)
        return self.realname

    def as_filedata(self) -> dict[str, Any]:
        """Summary handed to before-move observers.

        Returns:
            Plain dict describing the pending file.
        """
        return {
            'filename': self.realname,
            'filesize': self.filesize,
            'mimetype': self.mimetype,
            'extension': self.extension,
            'physical_filename': self.realname,
            'real_filename': self.uploadname,
        }

    def move_file(
        self,
        storage: 'AvatarStorage',
        *,
        overwrite: bool = True,
    ) -> bool:
        """Write the upload to storage under its physical name.

        Failures are recorded in ``errors`` instead of raised.

        Args:
            storage: Avatar storage backend.
            overwrite: Replace an existing object with the same name.

        Returns:
            True if the object was written.
        """
        if not self.realname:
            self.errors.append(Violation(
                'AVATAR_GENERAL_UPLOAD_ERROR',
                'Avatar has no storage name',
            ))
            return False

        try:
            storage.write(self.realname, self.upload_file, overwrite=overwrite)
        except StorageWriteError as exc:
            self.errors.extend(exc.errors)
            return False

        self.moved = True
        return True

    def remove(self) -> None:
        """Discard the temporary upload artifact.

        Closing a ``TemporaryUploadedFile`` removes its temp file; the
        path is unlinked as well in case the handle was reopened.
        """
        temp_path = None
        if hasattr(self.upload_file, 'temporary_file_path'):
            temp_path = self.upload_file.temporary_file_path()

        self.upload_file.close()
        if temp_path:
            Path(temp_path).unlink(missing_ok=True)
            logger.debug('Removed temporary upload: %s', temp_path)
