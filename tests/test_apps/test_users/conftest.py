"""Shared fixtures for users app tests."""

import pytest
from django.contrib.auth import get_user_model

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
