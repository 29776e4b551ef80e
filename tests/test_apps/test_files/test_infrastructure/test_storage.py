"""Tests for the S3 storage backend."""

import pytest

from server.apps.files.exceptions import StorageError
from server.apps.files.infrastructure.storage import (
    FileStorage,
    StorageConfig,
    build_storage,
)


@pytest.fixture
def missing_bucket_storage(mock_s3):
    """Storage pointing at a bucket that does not exist."""
    return FileStorage(
        StorageConfig(bucket_name='missing-bucket', region_name='us-east-1'),
    )


def test_config_from_settings(settings):
    """Test configuration is read from OBJECT_STORAGE."""
    settings.OBJECT_STORAGE = {
        'bucket_name': 'configured',
        'region_name': 'eu-west-1',
        'access_key': 'key',
        'secret_key': 'secret',
        'endpoint_url': 'http://minio:9000',
        'url_expire': 60,
    }

    config = StorageConfig.from_settings()

    assert config.bucket_name == 'configured'
    assert config.endpoint_url == 'http://minio:9000'
    assert config.url_expire == 60


def test_object_url_with_endpoint():
    """Test path-style URL for custom endpoints."""
    storage = FileStorage(
        StorageConfig(
            bucket_name='drive',
            region_name='us-east-1',
            endpoint_url='http://minio:9000/',
        ),
    )

    assert storage.object_url('users/u1/root/a b.txt') == (
        'http://minio:9000/drive/users/u1/root/a%20b.txt'
    )


def test_object_url_without_endpoint():
    """Test virtual-hosted URL for AWS."""
    storage = FileStorage(
        StorageConfig(bucket_name='drive', region_name='us-east-1'),
    )

    assert storage.object_url('users/u1/root/a.txt') == (
        'https://drive.s3.amazonaws.com/users/u1/root/a.txt'
    )


def test_put_head_and_exists(storage):
    """Test object is written under the exact key with its metadata."""
    storage.put(
        'users/u1/root/a.txt',
        b'hello',
        'text/plain',
        metadata={'originalName': 'Zoë.txt'},
    )

    info = storage.head('users/u1/root/a.txt')
    metadata = {key.lower(): value for key, value in info.metadata.items()}

    assert storage.exists('users/u1/root/a.txt')
    assert info.size == 5
    assert info.content_type == 'text/plain'
    assert metadata['originalname'] == 'Zo%C3%AB.txt'


def test_head_missing_object(storage):
    """Test missing object is reported as absent."""
    assert storage.head('users/u1/root/missing.txt') is None
    assert not storage.exists('users/u1/root/missing.txt')


def test_delete(storage):
    """Test delete removes the object."""
    storage.put('users/u1/root/a.txt', b'x', 'text/plain')

    storage.delete('users/u1/root/a.txt')

    assert not storage.exists('users/u1/root/a.txt')


def test_copy(storage):
    """Test server-side copy keeps the content."""
    storage.put('users/u1/root/a.txt', b'copy me', 'text/plain')

    url = storage.copy('users/u1/root/a.txt', 'users/u1/root/b.txt')

    assert url.endswith('users/u1/root/b.txt')
    assert storage.head('users/u1/root/b.txt').size == 7


def test_list_keys(storage):
    """Test listing is limited to the prefix."""
    storage.put('users/u1/root/a.txt', b'a', 'text/plain')
    storage.put('users/u2/root/b.txt', b'b', 'text/plain')

    assert list(storage.list_keys('users/u1/')) == ['users/u1/root/a.txt']


def test_presigned_urls(storage):
    """Test presigned URLs carry the key and a signature."""
    download = storage.presign_download('users/u1/root/a.txt', ttl=60)
    upload = storage.presign_upload('users/u1/root/a.txt', 'text/plain')

    assert 'users/u1/root/a.txt' in download
    assert 'Signature' in download
    assert 'users/u1/root/a.txt' in upload


def test_put_to_missing_bucket(missing_bucket_storage):
    """Test storage failures surface as StorageError."""
    with pytest.raises(StorageError, match='Failed to upload file'):
        missing_bucket_storage.put('users/u1/root/a.txt', b'x', 'text/plain')


def test_list_missing_bucket(missing_bucket_storage):
    """Test listing failures surface as StorageError."""
    with pytest.raises(StorageError):
        list(missing_bucket_storage.list_keys('users/'))


def test_build_storage_uses_settings(mock_s3, settings):
    """Test composition root reads the configured bucket."""
    assert build_storage().bucket_name == settings.OBJECT_STORAGE['bucket_name']


def test_put_escapes_percent_in_metadata(storage):
    """Test literal percent signs survive metadata encoding."""
    storage.put(
        'users/u1/root/a.txt',
        b'x',
        'text/plain',
        metadata={'originalName': '50%.txt', 'otherName': '50%25.txt'},
    )

    info = storage.head('users/u1/root/a.txt')
    metadata = {key.lower(): value for key, value in info.metadata.items()}

    assert metadata['originalname'] == '50%25.txt'
    assert metadata['othername'] == '50%2525.txt'
