"""JWT bearer token issue and verification."""

import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
from django.conf import settings

from server.apps.users.exceptions import AuthenticationError

logger = logging.getLogger(__name__)


def generate_token(user_id: Any, email: str) -> str:
    """Sign an access token for a user.

    Args:
        user_id: Identifier stored in the ``sub`` claim.
        email: User email, stored in the ``email`` claim.

    Returns:
        Encoded JWT string.
    """
    issued_at = datetime.now(tz=UTC)
    payload = {
        'sub': str(user_id),
        'email': email,
        'iat': issued_at,
        'exp': issued_at + timedelta(seconds=settings.JWT_EXPIRES_IN),
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET,
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_token(token: str) -> dict[str, Any]:
    """Verify signature and expiry of an access token.

    Args:
        token: Encoded JWT string.

    Returns:
        Token claims.

    Raises:
        AuthenticationError: If the token is expired, tampered or has
            no subject.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={'require': ['sub', 'exp']},
        )
    except jwt.ExpiredSignatureError as error:
        logger.info('Rejected expired token')
        raise AuthenticationError('Token expired') from error
    except jwt.InvalidTokenError as error:
        logger.warning('Rejected invalid token: %s', error)
        raise AuthenticationError('Invalid token') from error

    return payload
