"""Exceptions for avatars app."""

import enum
from collections.abc import Iterable
from dataclasses import dataclass


class UploadState(enum.Enum):
    """States of a single upload call."""

    IDLE = 'idle'
    VALIDATING = 'validating'
    REJECTED = 'rejected'
    AWAITING_HOOK = 'awaiting_hook'
    VETOED = 'vetoed'
    MOVING = 'moving'
    WRITE_FAILED = 'write_failed'
    MOVED = 'moved'
    STALE_CLEANUP_ATTEMPTED = 'stale_cleanup_attempted'
    DONE = 'done'


@dataclass(frozen=True, slots=True)
class Violation:
    """A single reason an avatar operation was refused.

    ``code`` is a stable identifier (e.g. ``AVATAR_WRONG_FILESIZE``),
    ``message`` is a human readable explanation.
    """

    code: str
    message: str = ''

    def __str__(self) -> str:
        """String representation."""
        return self.message or self.code


class UploadSkipped(Exception):  # noqa: N818
    """Base for conditions where there is nothing to upload."""


class UploadDisabledError(UploadSkipped):
    """Raised when avatar uploads are switched off for the platform."""

    def __init__(self) -> None:
        """Initialize UploadDisabledError."""
        super().__init__('Avatar uploads are disabled')


class NoFileSubmittedError(UploadSkipped):
    """Raised when the request did not carry a file."""

    def __init__(self) -> None:
        """Initialize NoFileSubmittedError."""
        super().__init__('No avatar file was submitted')


class AvatarUploadError(Exception):
    """Base for upload failures that carry a list of violations.

    Attributes:
        errors: Non-empty list of violations.
        state: Terminal state the upload ended in.
    """

    state = UploadState.REJECTED

    def __init__(self, errors: Iterable[Violation]) -> None:
        """Initialize AvatarUploadError.

        Args:
            errors: Violations that caused the failure.
        """
        self.errors = list(errors)
        super().__init__(
            '; '.join(str(error) for error in self.errors)
            or self.state.value,
        )

    @property
    def codes(self) -> list[str]:
        """Violation codes in the order they were recorded."""
        return [error.code for error in self.errors]


class ValidationFailedError(AvatarUploadError):
    """Raised when the submitted file breaks one or more constraints."""

    state = UploadState.REJECTED


class HookVetoedError(AvatarUploadError):
    """Raised when a before-move observer blocked the upload."""

    state = UploadState.VETOED


class StorageWriteError(AvatarUploadError):
    """Raised when the storage backend failed to store the avatar."""

    state = UploadState.WRITE_FAILED


class StorageDeleteError(Exception):
    """Raised by storage when an avatar object cannot be deleted."""

    def __init__(self, name: str) -> None:
        """Initialize StorageDeleteError.

        Args:
            name: Storage key that could not be deleted.
        """
        self.name = name
        super().__init__(f'Failed to delete avatar object: {name}')
