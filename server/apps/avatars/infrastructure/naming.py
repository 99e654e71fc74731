"""Avatar filename generation."""

from datetime import datetime

from django.utils import timezone


def physical_filename(salt: str, entity_id: int, extension: str) -> str:
    """Storage key of an entity's avatar.

    The name depends only on its inputs, so a re-upload with the same
    extension lands on (and replaces) the previous object.

    Args:
        salt: Per-deployment avatar salt.
        entity_id: Id of the owning entity.
        extension: Avatar extension without dot.

    Returns:
        Name like ``'s1_42.png'``.
    """
    return f'{salt}_{entity_id}.{extension.lower()}'


def logical_filename(
    entity_id: int,
    extension: str,
    now: datetime | None = None,
) -> str:
    """Public avatar name recorded on the owning row.

    The timestamp changes with every upload so clients do not keep
    serving a cached older image.

    Args:
        entity_id: Id of the owning entity.
        extension: Avatar extension without dot.
        now: Upload time, current time when omitted.

    Returns:
        Name like ``'42_1760000000.png'``.
    """
    moment = now or timezone.now()
    return f'{entity_id}_{int(moment.timestamp())}.{extension.lower()}'
