"""Tests for avatar business logic."""

import re

import pytest
from django.core.files.base import ContentFile

from server.apps.avatars.exceptions import ValidationFailedError
from server.apps.avatars.infrastructure.storage import AvatarStorage
from server.apps.avatars.logic.avatar_operations import (
    change_avatar,
    get_avatar_data,
    get_avatar_uploader,
    get_or_create_avatar,
    remove_avatar,
)
from server.apps.avatars.logic.uploader import AvatarUploader
from server.apps.avatars.models import Avatar


@pytest.mark.django_db
def test_change_avatar_records_upload(user, uploader, make_image, stored_keys):
    """Test a successful upload is persisted on the user's record."""
    avatar = change_avatar(user, make_image(), uploader=uploader)

    avatar.refresh_from_db()
    assert re.match(rf'^{user.id}_\d+\.png$', avatar.avatar)
    assert (avatar.avatar_width, avatar.avatar_height) == (50, 50)
    assert stored_keys() == [f's1_{user.id}.png']


@pytest.mark.django_db
def test_change_avatar_replaces_other_type(
    user,
    uploader,
    make_image,
    stored_keys,
):
    """Test switching file type leaves only the new object."""
    change_avatar(user, make_image(), uploader=uploader)

    avatar = change_avatar(
        user,
        make_image(
            name='avatar.jpg',
            image_format='JPEG',
            content_type='image/jpeg',
        ),
        uploader=uploader,
    )

    assert avatar.avatar.endswith('.jpg')
    assert stored_keys() == [f's1_{user.id}.jpg']


@pytest.mark.django_db
def test_change_avatar_rejected_keeps_record(
    user,
    uploader,
    make_image,
    stored_keys,
):
    """Test the record is untouched when the upload is rejected."""
    first = change_avatar(user, make_image(), uploader=uploader)

    with pytest.raises(ValidationFailedError):
        change_avatar(user, make_image(size=(500, 500)), uploader=uploader)

    avatar = Avatar.objects.get(user=user)
    assert avatar.avatar == first.avatar
    assert avatar.avatar_width == 50
    assert stored_keys() == [f's1_{user.id}.png']


@pytest.mark.django_db
def test_change_avatar_without_file(user, uploader):
    """Test nothing is recorded when no file was submitted."""
    assert change_avatar(user, None, uploader=uploader) is None
    assert Avatar.objects.get(user=user).avatar == ''


@pytest.mark.django_db
def test_user_isolation(user, other_user, uploader, make_image, stored_keys):
    """Test each user's avatar lives under its own key."""
    change_avatar(user, make_image(), uploader=uploader)
    change_avatar(other_user, make_image(), uploader=uploader)

    assert stored_keys() == sorted([
        f's1_{user.id}.png',
        f's1_{other_user.id}.png',
    ])


@pytest.mark.django_db
def test_remove_avatar(user, uploader, make_image, stored_keys):
    """Test removing deletes the object and clears the record."""
    change_avatar(user, make_image(), uploader=uploader)

    assert remove_avatar(user, uploader=uploader) is True

    avatar = Avatar.objects.get(user=user)
    assert avatar.avatar == ''
    assert stored_keys() == []


@pytest.mark.django_db
def test_remove_avatar_object_already_gone(user, uploader, avatar_storage):
    """Test the record is cleared even if the object is missing."""
    Avatar.objects.create(
        user=user,
        avatar=f'{user.id}_1700000000.png',
        avatar_width=50,
        avatar_height=50,
    )

    assert remove_avatar(user, uploader=uploader) is False
    assert Avatar.objects.get(user=user).avatar == ''


@pytest.mark.django_db
def test_remove_avatar_without_record(user, uploader):
    """Test removing when the user never had an avatar."""
    assert remove_avatar(user, uploader=uploader) is False


@pytest.mark.django_db
def test_get_avatar_data(user, uploader, avatar_storage):
    """Test display data for a stored avatar."""
    avatar_storage.write(f's1_{user.id}.png', ContentFile(b'data'))
    avatar = Avatar.objects.create(
        user=user,
        avatar=f'{user.id}_1700000000.png',
        avatar_width=50,
        avatar_height=40,
    )

    avatar_data = get_avatar_data(avatar, uploader=uploader)

    assert f's1_{user.id}.png' in avatar_data['src']
    assert (avatar_data['width'], avatar_data['height']) == (50, 40)


@pytest.mark.django_db
def test_get_or_create_avatar(user):
    """Test the record is created once on demand."""
    first = get_or_create_avatar(user)
    second = get_or_create_avatar(user)

    assert first.pk == second.pk == user.pk


def test_get_avatar_uploader(settings):
    """Test the factory wires settings and the avatars storage."""
    settings.AVATAR_SALT = 'configured'

    uploader = get_avatar_uploader()

    assert isinstance(uploader, AvatarUploader)
    assert isinstance(uploader.storage, AvatarStorage)
    assert uploader.avatar_settings.salt == 'configured'
