"""Shared fixtures for files app tests."""

import boto3
import pytest
from django.contrib.auth import get_user_model
from moto import mock_aws

from server.apps.files.infrastructure.storage import build_storage
from server.apps.files.logic.file_operations import FileManager
from server.apps.files.logic.folder_operations import FolderManager
from server.apps.users.infrastructure.tokens import generate_token

User = get_user_model()


@pytest.fixture
def user(db):
    """Create test user.

    Returns:
        User instance for testing.
    """
    return User.objects.create_user(
        email='test@example.com',
        password='testpass123',
        name='Test User',
    )


@pytest.fixture
def other_user(db):
    """Create second test user for isolation tests.

    Returns:
        Second user instance.
    """
    return User.objects.create_user(
        email='other@example.com',
        password='testpass123',
        name='Other User',
    )


@pytest.fixture
def mock_s3(settings):
    """Mock S3 service with the configured bucket.

    Local `.env` endpoints and credentials are replaced so every
    request reaches the mock.

    Yields:
        boto3 S3 resource with the bucket created.
    """
    settings.OBJECT_STORAGE = {
        **settings.OBJECT_STORAGE,
        'access_key': 'testing',
        'secret_key': 'testing',
        'endpoint_url': None,
        'region_name': 'us-east-1',
    }
    with mock_aws():
        conn = boto3.resource('s3', region_name='us-east-1')
        conn.create_bucket(Bucket=settings.OBJECT_STORAGE['bucket_name'])
        yield conn


@pytest.fixture
def bucket(mock_s3, settings):
    """Bucket that FileStorage writes to."""
    return mock_s3.Bucket(settings.OBJECT_STORAGE['bucket_name'])


@pytest.fixture
def storage(mock_s3):
    """FileStorage bound to the mocked bucket."""
    return build_storage()


@pytest.fixture
def folder_manager(storage):
    """FolderManager using the mocked storage."""
    return FolderManager(storage)


@pytest.fixture
def file_manager(storage):
    """FileManager using the mocked storage."""
    return FileManager(storage)


@pytest.fixture
def auth_headers(user):
    """Authorization header for ``user``."""
    return {'Authorization': f'Bearer {generate_token(user.id, user.email)}'}


@pytest.fixture
def other_auth_headers(other_user):
    """Authorization header for ``other_user``."""
    token = generate_token(other_user.id, other_user.email)
    return {'Authorization': f'Bearer {token}'}
