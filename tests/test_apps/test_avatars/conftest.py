"""Shared fixtures for avatars app tests."""

from io import BytesIO

import boto3
import pytest
from django.contrib.auth import get_user_model
from django.core.files.uploadedfile import SimpleUploadedFile
from moto import mock_aws
from PIL import Image

from server.apps.avatars.conf import AvatarSettings, parse_mime_triggers
from server.apps.avatars.infrastructure.storage import AvatarStorage
from server.apps.avatars.logic.uploader import AvatarUploader

User = get_user_model()

AVATAR_BUCKET = 'avatars'


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        username='testuser',
        password='testpass123',
        email='test@example.com',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        username='otheruser',
        password='testpass123',
        email='other@example.com',
    )


@pytest.fixture
def mock_s3():
    """Mock S3 service with avatars bucket.

    Yields:
        boto3 S3 resource with avatars bucket created.
    """
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=AVATAR_BUCKET)
        yield conn


@pytest.fixture
def stored_keys(mock_s3):
    """List keys currently in the avatars bucket.

    Returns:
        Callable returning sorted object keys.
    """
    def _stored_keys() -> list[str]:
        bucket = mock_s3.Bucket(AVATAR_BUCKET)
        return sorted(obj.key for obj in bucket.objects.all())
    return _stored_keys


@pytest.fixture
def avatar_settings():
    """Avatar limits used across tests.

    Returns:
        AvatarSettings with salt 's1' and 20..90 pixel bounds.
    """
    return AvatarSettings(
        uploads_enabled=True,
        max_filesize=6144,
        min_width=20,
        min_height=20,
        max_width=90,
        max_height=90,
        salt='s1',
        mime_triggers=parse_mime_triggers(
            'body|head|html|img|plaintext|a href|pre|script|table|title',
        ),
        hook_timeout=5.0,
    )


@pytest.fixture
def avatar_storage(mock_s3):
    """Avatar storage pointed at the mocked bucket.

    Returns:
        AvatarStorage instance.
    """
    return AvatarStorage(
        bucket_name=AVATAR_BUCKET,
        access_key='testing',
        secret_key='testing',
        region_name='us-east-1',
        file_overwrite=True,
    )


@pytest.fixture
def uploader(avatar_settings, avatar_storage):
    """Upload driver wired to the mocked storage.

    Returns:
        AvatarUploader instance.
    """
    return AvatarUploader(avatar_settings, avatar_storage)


@pytest.fixture
def make_image():
    """Build in-memory image uploads.

    Returns:
        Callable producing SimpleUploadedFile instances.
    """
    def _make_image(
        name: str = 'avatar.png',
        size: tuple[int, int] = (50, 50),
        image_format: str = 'PNG',
        content_type: str = 'image/png',
    ) -> SimpleUploadedFile:
        buffer = BytesIO()
        Image.new('RGB', size, color=(200, 30, 30)).save(
            buffer,
            format=image_format,
        )
        return SimpleUploadedFile(name, buffer.getvalue(), content_type)
    return _make_image


@pytest.fixture
def connect_hook():
    """Connect hook receivers for the duration of a test.

    Yields:
        Callable taking (signal, receiver).
    """
    connected = []

    def _connect(signal, hook_receiver) -> None:
        signal.connect(hook_receiver, weak=False)
        connected.append((signal, hook_receiver))

    yield _connect

    for signal, hook_receiver in connected:
        signal.disconnect(hook_receiver)
