"""Read-only avatar configuration."""

from dataclasses import dataclass, field
from typing import Final, Self

from django.conf import settings

_DEFAULT_EXTENSIONS: Final = ('gif', 'jpg', 'jpeg', 'png', 'webp')


@dataclass(frozen=True, slots=True)
class AvatarSettings:
    """Limits and naming inputs for avatar uploads.

    Numeric limits set to ``0`` are disabled.
    """

    uploads_enabled: bool = True
    max_filesize: int = 0
    min_width: int = 0
    min_height: int = 0
    max_width: int = 0
    max_height: int = 0
    salt: str = ''
    allowed_extensions: tuple[str, ...] = _DEFAULT_EXTENSIONS
    mime_triggers: tuple[str, ...] = field(default_factory=tuple)
    hook_timeout: float = 5.0

    @property
    def prefix(self) -> str:
        """Filename prefix shared by every physical avatar name."""
        return f'{self.salt}_'

    @classmethod
    def from_settings(cls) -> Self:
        """Build from Django settings.

        Returns:
            AvatarSettings populated from ``AVATAR_*`` settings.
        """
        return cls(
            uploads_enabled=getattr(settings, 'AVATAR_UPLOADS_ENABLED', True),
            max_filesize=getattr(settings, 'AVATAR_FILESIZE', 0),
            min_width=getattr(settings, 'AVATAR_MIN_WIDTH', 0),
            min_height=getattr(settings, 'AVATAR_MIN_HEIGHT', 0),
            max_width=getattr(settings, 'AVATAR_MAX_WIDTH', 0),
            max_height=getattr(settings, 'AVATAR_MAX_HEIGHT', 0),
            salt=getattr(settings, 'AVATAR_SALT', ''),
            allowed_extensions=tuple(
                extension.lower()
                for extension in getattr(
                    settings,
                    'AVATAR_ALLOWED_EXTENSIONS',
                    _DEFAULT_EXTENSIONS,
                )
            ),
            mime_triggers=parse_mime_triggers(
                getattr(settings, 'AVATAR_MIME_TRIGGERS', None),
            ),
            hook_timeout=getattr(settings, 'AVATAR_HOOK_TIMEOUT', 5.0),
        )


def parse_mime_triggers(raw_value: str | None) -> tuple[str, ...]:
    """Split a pipe-delimited trigger list.

    Args:
        raw_value: Value like ``'html|script'``, or None when unset.

    Returns:
        Non-empty trigger strings, empty tuple when unset.
    """
    if not raw_value:
        return ()
    return tuple(
        trigger for trigger in raw_value.split('|') if trigger.strip()
    )
