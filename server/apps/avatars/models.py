"""Database models for avatars app."""

from dataclasses import dataclass
from pathlib import Path
from typing import Final, final, override

from django.contrib.auth import get_user_model
from django.db import models

User = get_user_model()

_AVATAR_NAME_MAX_LENGTH: Final = 255


@dataclass(frozen=True, slots=True)
class AvatarRow:
    """Avatar fields of an owning entity, as seen by the uploader.

    ``avatar`` is the logical filename (``<id>_<timestamp>.<ext>``),
    empty when the entity has no uploaded avatar.
    """

    id: int  # noqa: WPS125
    avatar: str = ''
    avatar_width: int = 0
    avatar_height: int = 0

    @property
    def extension(self) -> str:
        """Extension of the current avatar, empty if none."""
        return Path(self.avatar).suffix.lstrip('.').lower()


@dataclass(frozen=True, slots=True)
class AvatarData:
    """Fields to persist on the owning row after a successful upload."""

    avatar: str
    avatar_width: int
    avatar_height: int


@final
class Avatar(models.Model):
    """Uploaded avatar of a user.

    The uploader never writes this record; callers persist the
    ``AvatarData`` it returns (see ``logic.avatar_operations``).
    """

    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        related_name='avatar',
        primary_key=True,
    )

    avatar = models.CharField(
        max_length=_AVATAR_NAME_MAX_LENGTH,
        blank=True,
        default='',
        help_text='Logical filename: {user_id}_{timestamp}.ext',
    )

    avatar_width = models.PositiveIntegerField(default=0)
    avatar_height = models.PositiveIntegerField(default=0)

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        """Model metadata."""

        verbose_name = 'Avatar'  # type: ignore[mutable-override]
        verbose_name_plural = 'Avatars'  # type: ignore[mutable-override]

    @override
    def __str__(self) -> str:
        """String representation."""
        return f'{self.user.username}:{self.avatar or "-"}'

    def as_row(self) -> AvatarRow:
        """Snapshot of the avatar fields for the uploader.

        Returns:
            AvatarRow keyed by the owning user's id.
        """
        return AvatarRow(
            id=self.user_id,
            avatar=self.avatar,
            avatar_width=self.avatar_width,
            avatar_height=self.avatar_height,
        )

    def apply(self, avatar_data: AvatarData) -> None:
        """Copy uploaded avatar fields onto this record (unsaved).

        Args:
            avatar_data: Result of a successful upload.
        """
        self.avatar = avatar_data.avatar
        self.avatar_width = avatar_data.avatar_width
        self.avatar_height = avatar_data.avatar_height

    def clear(self) -> None:
        """Reset avatar fields (unsaved)."""
        self.avatar = ''
        self.avatar_width = 0
        self.avatar_height = 0
