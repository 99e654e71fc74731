"""Integration tests for avatar storage against MinIO.

These tests verify that AvatarStorage works against a real
S3-compatible server when running in Docker Compose.
"""
import os
from typing import Final

import boto3
import pytest
from botocore.client import BaseClient
from botocore.exceptions import ClientError
from django.core.files.base import ContentFile

from server.apps.avatars.exceptions import StorageWriteError
from server.apps.avatars.infrastructure.storage import AvatarStorage

_TEST_BUCKET: Final = 'avatars-integration'
_TEST_KEY: Final = 'it_1.png'


@pytest.fixture
def s3_client() -> BaseClient:
    """Create S3 client for MinIO.

    Returns:
        Configured boto3 S3 client for MinIO.
    """
    return boto3.client(
        's3',
        endpoint_url=os.getenv('MINIO_ENDPOINT', 'http://minio:9000'),
        aws_access_key_id=os.getenv('MINIO_ROOT_USER', 'minioadmin'),
        aws_secret_access_key=os.getenv('MINIO_ROOT_PASSWORD', 'minioadmin'),
        region_name='us-east-1',
    )


@pytest.fixture
def minio_storage(s3_client: BaseClient) -> AvatarStorage:
    """Avatar storage bound to a fresh MinIO bucket.

    Args:
        s3_client: boto3 S3 client.

    Returns:
        AvatarStorage instance.
    """
    try:
        s3_client.head_bucket(Bucket=_TEST_BUCKET)
    except ClientError:
        s3_client.create_bucket(Bucket=_TEST_BUCKET)
    s3_client.delete_object(Bucket=_TEST_BUCKET, Key=_TEST_KEY)

    return AvatarStorage(
        bucket_name=_TEST_BUCKET,
        endpoint_url=os.getenv('MINIO_ENDPOINT', 'http://minio:9000'),
        access_key=os.getenv('MINIO_ROOT_USER', 'minioadmin'),
        secret_key=os.getenv('MINIO_ROOT_PASSWORD', 'minioadmin'),
        region_name='us-east-1',
    )


@pytest.mark.integration
def test_write_and_overwrite(
    minio_storage: AvatarStorage,
    s3_client: BaseClient,
) -> None:
    """Test keyed writes replace the object in place.

    Args:
        minio_storage: Avatar storage on MinIO.
        s3_client: boto3 S3 client.
    """
    minio_storage.write(_TEST_KEY, ContentFile(b'first'))
    minio_storage.write(_TEST_KEY, ContentFile(b'second'))

    response = s3_client.get_object(Bucket=_TEST_BUCKET, Key=_TEST_KEY)
    assert response['Body'].read() == b'second'


@pytest.mark.integration
def test_write_refuses_existing(minio_storage: AvatarStorage) -> None:
    """Test writes without overwrite keep the existing object.

    Args:
        minio_storage: Avatar storage on MinIO.
    """
    minio_storage.write(_TEST_KEY, ContentFile(b'first'))

    with pytest.raises(StorageWriteError):
        minio_storage.write(_TEST_KEY, ContentFile(b'x'), overwrite=False)


@pytest.mark.integration
def test_delete_object(
    minio_storage: AvatarStorage,
    s3_client: BaseClient,
) -> None:
    """Test deleting an avatar object from MinIO.

    Args:
        minio_storage: Avatar storage on MinIO.
        s3_client: boto3 S3 client.
    """
    minio_storage.write(_TEST_KEY, ContentFile(b'data'))

    minio_storage.delete(_TEST_KEY)

    with pytest.raises(ClientError) as exc_info:
        s3_client.head_object(Bucket=_TEST_BUCKET, Key=_TEST_KEY)

    assert exc_info.value.response['Error']['Code'] == '404'
