"""Upload checks run before any storage I/O."""

import logging

from django.core.files.uploadedfile import UploadedFile

from server.apps.avatars.conf import AvatarSettings
from server.apps.avatars.exceptions import (
    NoFileSubmittedError,
    UploadDisabledError,
    ValidationFailedError,
    Violation,
)
from server.apps.avatars.infrastructure.filespec import FileSpec
from server.apps.avatars.infrastructure.metadata import (
    contains_disallowed_content,
    format_matches_extension,
    probe_image,
)

logger = logging.getLogger(__name__)


class AvatarValidator:
    """Checks a submitted avatar against the configured limits.

    Checking never touches the avatar storage. The only side effect
    is Django staging large uploads in a temporary file.
    """

    def __init__(self, avatar_settings: AvatarSettings) -> None:
        """Initialize AvatarValidator.

        Args:
            avatar_settings: Limits to enforce.
        """
        self.avatar_settings = avatar_settings

    def check_enabled(self, upload_file: UploadedFile | None) -> None:
        """Make sure there is something to upload.

        Args:
            upload_file: File from the request, if any.

        Raises:
            UploadDisabledError: If uploads are switched off.
            NoFileSubmittedError: If no file was submitted.
        """
        if not self.avatar_settings.uploads_enabled:
            raise UploadDisabledError
        if upload_file is None or not upload_file.name:
            raise NoFileSubmittedError

    def inspect(self, upload_file: UploadedFile) -> FileSpec:
        """Measure the upload and record every violated limit.

        Args:
            upload_file: File from the request.

        Returns:
            FileSpec whose ``errors`` lists the violations, if any.
        """
        file_spec = FileSpec.from_upload(upload_file)
        file_spec.errors.extend(self._common_checks(file_spec))
        if file_spec.filesize:
            file_spec.errors.extend(self._image_checks(file_spec))

        if file_spec.errors:
            logger.info(
                'Avatar upload %s rejected: %s',
                file_spec.uploadname,
                ', '.join(error.code for error in file_spec.errors),
            )
        return file_spec

    def validate(self, upload_file: UploadedFile | None) -> FileSpec:
        """Run all checks and fail on the first problem class found.

        A rejected upload is discarded before the error is raised.

        Args:
            upload_file: File from the request, if any.

        Returns:
            FileSpec of a valid upload.

        Raises:
            UploadDisabledError: If uploads are switched off.
            NoFileSubmittedError: If no file was submitted.
            ValidationFailedError: If any limit is violated.
        """
        self.check_enabled(upload_file)
        file_spec = self.inspect(upload_file)  # type: ignore[arg-type]
        if file_spec.errors:
            file_spec.remove()
            raise ValidationFailedError(file_spec.errors)
        return file_spec

    def _common_checks(self, file_spec: FileSpec) -> list[Violation]:
        limits = self.avatar_settings
        errors: list[Violation] = []

        if not file_spec.filesize:
            errors.append(Violation(
                'AVATAR_EMPTY_FILEUPLOAD',
                'The submitted avatar file is empty',
            ))

        if file_spec.extension not in limits.allowed_extensions:
            errors.append(Violation(
                'AVATAR_DISALLOWED_EXTENSION',
                f'The extension "{file_spec.extension}" is not allowed',
            ))

        if limits.max_filesize and file_spec.filesize > limits.max_filesize:
            errors.append(Violation(
                'AVATAR_WRONG_FILESIZE',
                f'The avatar must be at most {limits.max_filesize} bytes, '
                f'got {file_spec.filesize}',
            ))

        if contains_disallowed_content(
            file_spec.upload_file,
            limits.mime_triggers,
        ):
            errors.append(Violation(
                'AVATAR_DISALLOWED_CONTENT',
                'The upload was rejected because it contains '
                'disallowed content',
            ))

        return errors

    def _image_checks(self, file_spec: FileSpec) -> list[Violation]:
        image_info = probe_image(file_spec.upload_file)
        if image_info is None:
            return [Violation(
                'AVATAR_UNABLE_GET_IMAGE_SIZE',
                'Could not determine the dimensions of the image',
            )]

        file_spec.width = image_info.width
        file_spec.height = image_info.height

        errors: list[Violation] = []
        if not format_matches_extension(
            image_info.format,
            file_spec.extension,
        ):
            errors.append(Violation(
                'AVATAR_IMAGE_FILETYPE_MISMATCH',
                f'Image type {image_info.format or "unknown"} does not '
                f'match the extension "{file_spec.extension}"',
            ))

        if not self._valid_dimensions(image_info.width, image_info.height):
            limits = self.avatar_settings
            errors.append(Violation(
                'AVATAR_WRONG_SIZE',
                f'The avatar must be between {limits.min_width}x'
                f'{limits.min_height} and {limits.max_width}x'
                f'{limits.max_height} pixels, got {image_info.width}x'
                f'{image_info.height}',
            ))
        return errors

    def _valid_dimensions(self, width: int, height: int) -> bool:
        limits = self.avatar_settings
        # A bound of zero is not enforced
        too_big = (
            (limits.max_width and width > limits.max_width)
            or (limits.max_height and height > limits.max_height)
        )
        too_small = (
            (limits.min_width and width < limits.min_width)
            or (limits.min_height and height < limits.min_height)
        )
        return not (too_big or too_small)
