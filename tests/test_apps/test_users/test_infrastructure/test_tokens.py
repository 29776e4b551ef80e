"""Tests for JWT issue and verification."""

import jwt
import pytest

from server.apps.users.exceptions import AuthenticationError
from server.apps.users.infrastructure.tokens import decode_token, generate_token


def test_token_claims(settings):
    """Test token carries subject, email and lifetime."""
    settings.JWT_EXPIRES_IN = 120

    payload = decode_token(generate_token('user-1', 'a@example.com'))

    assert payload['sub'] == 'user-1'
    assert payload['email'] == 'a@example.com'
    assert payload['exp'] - payload['iat'] == 120


def test_expired_token(settings):
    """Test expired token is rejected."""
    settings.JWT_EXPIRES_IN = -10
    token = generate_token('user-1', 'a@example.com')

    with pytest.raises(AuthenticationError, match='Token expired'):
        decode_token(token)


def test_token_signed_with_other_secret(settings):
    """Test token with a foreign signature is rejected."""
    token = jwt.encode(
        {'sub': 'user-1', 'exp': 4102444800},
        'another-secret-that-is-long-enough-for-hs256',
        algorithm='HS256',
    )

    with pytest.raises(AuthenticationError, match='Invalid token'):
        decode_token(token)


def test_token_without_subject(settings):
    """Test token missing the sub claim is rejected."""
    token = jwt.encode(
        {'exp': 4102444800},
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )

    with pytest.raises(AuthenticationError, match='Invalid token'):
        decode_token(token)


def test_garbage_token():
    """Test non-JWT strings are rejected."""
    with pytest.raises(AuthenticationError, match='Invalid token'):
        decode_token('not.a.token')
