"""Metadata extraction utilities for uploaded avatars."""

import logging
import mimetypes
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Final

from PIL import Image

logger = logging.getLogger(__name__)

# Only the start of the file is sniffed for disallowed content
_SNIFF_SIZE: Final = 256

# Pillow format name -> extensions that may carry it
_FORMAT_EXTENSIONS: Final[dict[str, frozenset[str]]] = {
    'GIF': frozenset(('gif',)),
    'JPEG': frozenset(('jpg', 'jpeg')),
    # Multi-picture JPEG from cameras
    'MPO': frozenset(('jpg', 'jpeg')),
    'PNG': frozenset(('png',)),
    'WEBP': frozenset(('webp',)),
}


@dataclass(frozen=True, slots=True)
class ImageInfo:
    """Measured properties of an image."""

    width: int
    height: int
    format: str  # noqa: WPS125


def get_file_extension(filename: str) -> str:
    """Get file extension from filename.

    Args:
        filename: Filename (e.g., 'avatar.PNG').

    Returns:
        Extension without dot, lowercase (e.g., 'png').
        Returns empty string if no extension.
    """
    extension = Path(filename).suffix
    return extension.lstrip('.').lower()


def detect_mime_type(filename: str, declared: str | None = None) -> str:
    """Detect MIME type of an upload.

    The type declared by the client wins; otherwise it is guessed
    from the filename extension.

    Args:
        filename: Filename with extension.
        declared: Content type sent with the upload, if any.

    Returns:
        MIME type string, 'application/octet-stream' if unknown.
    """
    if declared:
        return declared
    mime_type, _ = mimetypes.guess_type(filename)
    if mime_type is None:
        return 'application/octet-stream'
    return mime_type


def read_head(file_obj: BinaryIO, size: int = _SNIFF_SIZE) -> bytes:
    """Read the first bytes of a file and rewind it.

    Args:
        file_obj: File-like object.
        size: Number of bytes to read.

    Returns:
        Up to ``size`` leading bytes.
    """
    file_obj.seek(0)
    head = file_obj.read(size)
    file_obj.seek(0)
    return head


def contains_disallowed_content(
    file_obj: BinaryIO,
    triggers: tuple[str, ...],
) -> bool:
    """Check whether the file starts with markup-like content.

    Browsers may sniff such files as HTML, so images carrying any of
    the triggers are refused. Matching is case insensitive.

    Args:
        file_obj: File-like object to inspect.
        triggers: Strings that must not occur in the leading bytes.

    Returns:
        True if any trigger was found.
    """
    if not triggers:
        return False

    head = read_head(file_obj).lower()
    for trigger in triggers:
        if trigger.lower().encode() in head:
            logger.warning('Disallowed content found in upload: %r', trigger)
            return True
    return False


def probe_image(file_obj: BinaryIO) -> ImageInfo | None:
    """Measure image dimensions with Pillow.

    Only the header is parsed; pixel data is not decoded.

    Args:
        file_obj: File-like object holding the image.

    Returns:
        ImageInfo, or None when the file is not a readable image.
    """
    file_obj.seek(0)
    try:
        with Image.open(file_obj) as img:
            width, height = img.size
            image_format = img.format or ''
    except (OSError, Image.DecompressionBombError):
        logger.info('Unable to read image dimensions', exc_info=True)
        return None
    finally:
        file_obj.seek(0)

    return ImageInfo(width=width, height=height, format=image_format)


def format_matches_extension(image_format: str, extension: str) -> bool:
    """Check that the detected image format fits the extension.

    Args:
        image_format: Pillow format name (e.g. 'PNG').
        extension: Lowercase extension (e.g. 'png').

    Returns:
        True if they agree. Unknown formats never match.
    """
    return extension in _FORMAT_EXTENSIONS.get(image_format.upper(), ())
