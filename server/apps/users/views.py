"""JSON endpoints for registration, email checks and login."""

import logging
from http import HTTPStatus

from django.http import HttpRequest, JsonResponse

from server.apps.users.forms import LoginForm, RegisterUserForm
from server.apps.users.logic.user_operations import (
    is_email_in_use,
    login,
    register_user,
)
from server.common.api import api_view, parse_json, validated

logger = logging.getLogger(__name__)


@api_view(['POST'])
def login_view(request: HttpRequest) -> JsonResponse:
    """Exchange email and password for an access token."""
    credentials = validated(LoginForm(parse_json(request)))
    token = login(credentials['email'], credentials['password'])
    return JsonResponse({'access_token': token}, status=HTTPStatus.CREATED)


@api_view(['POST'])
def create_user(request: HttpRequest) -> JsonResponse:
    """Register an account and return it with its first token."""
    data = validated(RegisterUserForm(parse_json(request)))
    registered = register_user(data['name'], data['email'], data['password'])
    user = registered.user
    return JsonResponse(
        {
            'id': str(user.id),
            'name': user.name,
            'email': user.email,
            'access_token': registered.access_token,
        },
        status=HTTPStatus.CREATED,
    )


@api_view(['GET'])
def check_email(request: HttpRequest) -> JsonResponse:
    """Report whether an email is already registered."""
    in_use = is_email_in_use(request.GET.get('email', ''))
    return JsonResponse({'inUse': in_use})
