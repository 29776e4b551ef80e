"""Object storage backend for S3-compatible storage."""

import logging
import string
from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from typing import Final, Self, final
from urllib.parse import quote

from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings
from storages.backends.s3 import S3Storage
from typing_extensions import override

from server.apps.files.exceptions import StorageError

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES: Final = frozenset(('404', 'NoSuchKey', 'NotFound'))
# S3 user metadata travels in HTTP headers and must stay ASCII.
# A literal percent sign is always escaped.
_METADATA_SAFE_CHARS: Final = string.punctuation.replace('%', '') + ' '
_DEFAULT_CONTENT_TYPE: Final = 'application/octet-stream'


@final
@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Connection settings for the object storage bucket."""

    bucket_name: str
    region_name: str
    access_key: str = ''
    secret_key: str = ''
    endpoint_url: str | None = None
    url_expire: int = 3600

    @classmethod
    def from_settings(cls) -> Self:
        """Read configuration from ``settings.OBJECT_STORAGE``.

        Returns:
            StorageConfig built from Django settings.
        """
        return cls(**settings.OBJECT_STORAGE)


@final
@dataclass(frozen=True, slots=True)
class ObjectInfo:
    """Result of a HEAD request on a stored object."""

    key: str
    size: int
    last_modified: datetime | None
    content_type: str
    metadata: dict[str, str]


@final
class FileStorage(S3Storage):
    """S3 storage backend for user files.

    Extends django-storages S3Storage with:
    - Exact-key writes carrying content type and user metadata
    - Presigned upload URLs, server-side copy and HEAD lookups
    - Errors from boto3 surfaced as StorageError
    """

    def __init__(self, config: StorageConfig) -> None:
        """Initialize storage from an explicit configuration.

        Args:
            config: Bucket, region, credentials and URL lifetime.
        """
        super().__init__(
            bucket_name=config.bucket_name,
            region_name=config.region_name,
            access_key=config.access_key or None,
            secret_key=config.secret_key or None,
            endpoint_url=config.endpoint_url,
            querystring_expire=config.url_expire,
            file_overwrite=False,  # Prevent accidental overwrites
            default_acl=None,  # Inherit bucket ACL
        )
        self.storage_config = config

    def object_url(self, key: str) -> str:
        """Get the permanent (unsigned) URL of an object.

        Args:
            key: Storage key.

        Returns:
            Bucket URL of the object.
        """
        if self.storage_config.endpoint_url:
            return '{endpoint}/{bucket}/{key}'.format(
                endpoint=self.storage_config.endpoint_url.rstrip('/'),
                bucket=self.bucket_name,
                key=quote(key),
            )
        return f'https://{self.bucket_name}.s3.amazonaws.com/{quote(key)}'

    def put(
        self,
        key: str,
        content: bytes,
        content_type: str,
        metadata: dict[str, str] | None = None,
    ) -> str:
        """Write an object under exactly the given key.

        Args:
            key: Storage key.
            content: Raw bytes to store.
            content_type: MIME type saved with the object.
            metadata: User metadata tags.

        Returns:
            Permanent URL of the stored object.

        Raises:
            StorageError: If the upload fails.
        """
        encoded_metadata = {
            name: quote(str(value), safe=_METADATA_SAFE_CHARS)
            for name, value in (metadata or {}).items()
        }
        try:
            logger.info('Uploading object to storage: %s', key)
            self.bucket.Object(key).put(
                Body=content,
                ContentType=content_type or _DEFAULT_CONTENT_TYPE,
                Metadata=encoded_metadata,
            )
        except (BotoCoreError, ClientError) as error:
            logger.exception('Failed to upload object to storage: %s', key)
            raise StorageError('upload', key) from error

        logger.info('Successfully uploaded object: %s', key)
        return self.object_url(key)

    @override
    def delete(self, name: str) -> None:
        """Delete an object with error handling and logging.

        Args:
            name: Storage key of the object to delete.

        Raises:
            StorageError: If the delete fails.
        """
        try:
            logger.info('Deleting object from storage: %s', name)
            super().delete(name)
        except (BotoCoreError, ClientError) as error:
            logger.exception('Failed to delete object from storage: %s', name)
            raise StorageError('delete', name) from error
        logger.info('Successfully deleted object: %s', name)

    def head(self, key: str) -> ObjectInfo | None:
        """Fetch object information without downloading it.

        Args:
            key: Storage key.

        Returns:
            ObjectInfo, or None if the object does not exist.

        Raises:
            StorageError: On any failure other than a missing object.
        """
        try:
            response = self.bucket.meta.client.head_object(
                Bucket=self.bucket_name,
                Key=key,
            )
        except ClientError as error:
            if error.response.get('Error', {}).get('Code') in _NOT_FOUND_CODES:
                return None
            logger.exception('Failed to get object info: %s', key)
            raise StorageError('inspect', key) from error
        except BotoCoreError as error:
            logger.exception('Failed to get object info: %s', key)
            raise StorageError('inspect', key) from error

        return ObjectInfo(
            key=key,
            size=response.get('ContentLength', 0),
            last_modified=response.get('LastModified'),
            content_type=response.get('ContentType', _DEFAULT_CONTENT_TYPE),
            metadata=response.get('Metadata', {}),
        )

    @override
    def exists(self, name: str) -> bool:
        """Check whether an object exists.

        Args:
            name: Storage key.

        Returns:
            True if the object exists.
        """
        return self.head(name) is not None

    def presign_download(self, key: str, ttl: int | None = None) -> str:
        """Generate a time-limited download URL.

        Args:
            key: Storage key.
            ttl: Lifetime in seconds, defaults to the configured expiry.

        Returns:
            Presigned GET URL.

        Raises:
            StorageError: If signing fails.
        """
        try:
            return self.url(key, expire=ttl or self.storage_config.url_expire)
        except (BotoCoreError, ClientError) as error:
            logger.exception('Failed to generate download URL: %s', key)
            raise StorageError('generate download URL for', key) from error

    def presign_upload(
        self,
        key: str,
        content_type: str,
        ttl: int | None = None,
    ) -> str:
        """Generate a time-limited URL for a direct client upload.

        Args:
            key: Storage key the client will write to.
            content_type: Content type the client must send.
            ttl: Lifetime in seconds, defaults to the configured expiry.

        Returns:
            Presigned PUT URL.

        Raises:
            StorageError: If signing fails.
        """
        try:
            return self.bucket.meta.client.generate_presigned_url(
                'put_object',
                Params={
                    'Bucket': self.bucket_name,
                    'Key': key,
                    'ContentType': content_type,
                },
                ExpiresIn=ttl or self.storage_config.url_expire,
            )
        except (BotoCoreError, ClientError) as error:
            logger.exception('Failed to generate upload URL: %s', key)
            raise StorageError('generate upload URL for', key) from error

    def copy(self, source_key: str, destination_key: str) -> str:
        """Copy an object server-side.

        Args:
            source_key: Existing storage key.
            destination_key: Key of the copy.

        Returns:
            Permanent URL of the copy.

        Raises:
            StorageError: If the copy fails.
        """
        try:
            logger.info('Copying object: %s -> %s', source_key, destination_key)
            copy_source = {
                'Bucket': self.bucket_name,
                'Key': source_key,
            }
            self.bucket.copy(copy_source, destination_key)
        except (BotoCoreError, ClientError) as error:
            logger.exception(
                'Copy failed: %s -> %s',
                source_key,
                destination_key,
            )
            raise StorageError('copy', source_key) from error

        return self.object_url(destination_key)

    def list_keys(self, prefix: str) -> Iterator[str]:
        """Iterate over keys stored under a prefix.

        Args:
            prefix: Key prefix (e.g., 'users/').

        Yields:
            Storage keys, paginated transparently by boto3.

        Raises:
            StorageError: If listing fails.
        """
        try:
            for summary in self.bucket.objects.filter(Prefix=prefix):
                yield summary.key
        except (BotoCoreError, ClientError) as error:
            logger.exception('Failed to list objects: %s', prefix)
            raise StorageError('list', prefix) from error


def build_storage(config: StorageConfig | None = None) -> FileStorage:
    """Build the storage backend for one request or command run.

    Args:
        config: Explicit configuration, read from settings when omitted.

    Returns:
        Configured FileStorage.
    """
    return FileStorage(config or StorageConfig.from_settings())
