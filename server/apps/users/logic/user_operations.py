"""Business logic for registration and login."""

import logging
from dataclasses import dataclass
from typing import final

from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction

from server.apps.users.exceptions import AuthenticationError
from server.apps.users.infrastructure.tokens import (
    decode_token,
    generate_token,
)
from server.apps.users.models import User

logger = logging.getLogger(__name__)

_EMAIL_IN_USE = 'Email already in use'
_INVALID_CREDENTIALS = 'Invalid credentials'


@final
@dataclass(frozen=True, slots=True)
class RegisteredUser:
    """Newly created user together with its first access token."""

    user: User
    access_token: str


def is_email_in_use(email: str) -> bool:
    """Check whether an account already uses the email.

    Args:
        email: Email to look up.

    Returns:
        True if a user with this email exists.

    Raises:
        ValidationError: If email is empty or blank.
    """
    if not email or not email.strip():
        raise ValidationError('Email parameter is required')

    normalized = User.objects.normalize_email(email.strip())
    return User.objects.filter(email=normalized).exists()


def register_user(name: str, email: str, password: str) -> RegisteredUser:
    """Create an account and sign its first token.

    Args:
        name: Display name.
        email: Login email, must not be in use.
        password: Raw password.

    Returns:
        RegisteredUser with the created user and its access token.

    Raises:
        ValidationError: If the email is already in use.
    """
    if is_email_in_use(email):
        logger.info('Registration rejected, email in use')
        raise ValidationError(_EMAIL_IN_USE)

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email.strip(),
                password=password,
                name=name,
            )
    except IntegrityError as error:
        # Concurrent registration won the unique constraint
        raise ValidationError(_EMAIL_IN_USE) from error

    logger.info('User registered: ID=%s', user.id)
    return RegisteredUser(
        user=user,
        access_token=generate_token(user.id, user.email),
    )


def login(email: str, password: str) -> str:
    """Verify credentials and issue an access token.

    Args:
        email: Login email.
        password: Raw password.

    Returns:
        Signed access token.

    Raises:
        AuthenticationError: If the email is unknown, the password is
            wrong or the account is inactive.
    """
    normalized = User.objects.normalize_email(email.strip())
    user = User.objects.filter(email=normalized).first()

    if user is None:
        logger.warning('Login failed: unknown email')
        raise AuthenticationError(_INVALID_CREDENTIALS)

    if not user.check_password(password) or not user.is_active:
        logger.warning('Login failed for user ID=%s', user.id)
        raise AuthenticationError(_INVALID_CREDENTIALS)

    logger.info('User logged in: ID=%s', user.id)
    return generate_token(user.id, user.email)


def authenticate_token(token: str) -> User:
    """Resolve the user a bearer token was issued to.

    Args:
        token: Encoded JWT string.

    Returns:
        Active User referenced by the ``sub`` claim.

    Raises:
        AuthenticationError: If the token is invalid or its user no
            longer exists or is inactive.
    """
    payload = decode_token(token)

    try:
        user = User.objects.get(id=payload['sub'], is_active=True)
    except (User.DoesNotExist, ValidationError) as error:
        # ValidationError covers a `sub` that is not a UUID
        raise AuthenticationError('Invalid token') from error

    return user
