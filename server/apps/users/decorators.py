"""View decorators for bearer token authentication."""

from collections.abc import Callable
from functools import wraps
from typing import Any, Final

from django.http import HttpRequest, HttpResponse

from server.apps.users.exceptions import AuthenticationError
from server.apps.users.logic.user_operations import authenticate_token

_BEARER_PREFIX: Final = 'Bearer '


def get_bearer_token(request: HttpRequest) -> str:
    """Extract the token from the Authorization header.

    Args:
        request: Incoming request.

    Returns:
        Raw token string.

    Raises:
        AuthenticationError: If the header is missing or not a bearer
            credential.
    """
    header = request.headers.get('Authorization', '')
    if not header.startswith(_BEARER_PREFIX):
        raise AuthenticationError('Missing bearer token')

    token = header.removeprefix(_BEARER_PREFIX).strip()
    if not token:
        raise AuthenticationError('Missing bearer token')
    return token


def jwt_required(
    view: Callable[..., HttpResponse],
) -> Callable[..., HttpResponse]:
    """Require a valid bearer token and set ``request.user``.

    Must be wrapped by ``api_view`` so AuthenticationError becomes 401.
    """
    @wraps(view)
    def wrapper(
        request: HttpRequest,
        *args: Any,
        **kwargs: Any,
    ) -> HttpResponse:
        request.user = authenticate_token(get_bearer_token(request))
        return view(request, *args, **kwargs)

    return wrapper
