"""Django storage configuration for S3-compatible backends.

This module configures django-storages to work with:
- MinIO for local development
- Cloudflare R2 for production

Both are S3-compatible and use the same S3Storage backend.
"""

from typing import Any, Final

from server.settings.components import config

# Storage configuration dictionary
# Avatars live in their own bucket, static files stay local
STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'avatars': {
        'BACKEND': 'server.apps.avatars.infrastructure.storage.AvatarStorage',
        'OPTIONS': {
            'bucket_name': config(
                'AVATAR_STORAGE_BUCKET_NAME',
                default='avatars',
            ),
            'access_key': config('AWS_ACCESS_KEY_ID', default='minioadmin'),
            'secret_key': config(
                'AWS_SECRET_ACCESS_KEY',
                default='minioadmin',
            ),
            'endpoint_url': config(
                'AWS_S3_ENDPOINT_URL',
                default=None,
            ),
            'region_name': config(
                'AWS_S3_REGION_NAME',
                default='us-east-1',
            ),
            # Physical avatar names are deterministic, re-uploads replace
            'file_overwrite': True,
            'default_acl': None,  # Inherit bucket ACL
        },
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
