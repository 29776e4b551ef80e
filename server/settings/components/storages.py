"""Object storage configuration for S3-compatible backends.

User content goes to a single bucket (MinIO locally, S3 or R2 in
production). The values below feed ``StorageConfig.from_settings()``;
``FileStorage`` instances are built from it per request.
"""

from typing import Any, Final

from server.settings.components import config

OBJECT_STORAGE: Final[dict[str, Any]] = {
    'bucket_name': config(
        'AWS_STORAGE_BUCKET_NAME',
        default='folder-drive',
    ),
    'access_key': config('AWS_ACCESS_KEY_ID', default=''),
    'secret_key': config('AWS_SECRET_ACCESS_KEY', default=''),
    'endpoint_url': config(
        'AWS_S3_ENDPOINT_URL',
        default=None,
    ),
    'region_name': config(
        'AWS_S3_REGION_NAME',
        default='us-east-1',
    ),
    # Lifetime of presigned download and upload URLs, in seconds
    'url_expire': config('AWS_QUERYSTRING_EXPIRE', cast=int, default=3600),
}

STORAGES: Final[dict[str, dict[str, Any]]] = {
    'default': {
        'BACKEND': 'django.core.files.storage.FileSystemStorage',
    },
    'staticfiles': {
        'BACKEND': 'django.contrib.staticfiles.storage.StaticFilesStorage',
    },
}
